"""CRUD 基类：为各实体提供按所有者隔离的通用数据访问方法。

与服务层的约定：CRUD 方法只 ``flush`` 不 ``commit``，事务边界由服务层的
``atomic`` 统一控制，保证多步变更要么全部生效要么全部回滚。
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.orm import Query, Session

from app.packages.inventory.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    """封装常见的查询、创建与保存逻辑，减少重复代码。"""

    def __init__(self, model: Type[ModelType]):
        self.model = model

    # 统一构造带软删除与所有者过滤的查询；owner_id 为必填参数而非上下文变量
    def query(self, db: Session, *, owner_id: int, include_deleted: bool = False) -> Query:
        query = db.query(self.model).filter(self.model.owner_id == owner_id)
        if hasattr(self.model, "is_deleted") and not include_deleted:
            query = query.filter(self.model.is_deleted.is_(False))
        return query

    def get(self, db: Session, id: Any, *, owner_id: int, include_deleted: bool = False) -> Optional[ModelType]:
        query = self.query(db, owner_id=owner_id, include_deleted=include_deleted)
        return query.filter(self.model.id == id).first()

    def create(self, db: Session, obj_in: Dict[str, Any], *, owner_id: int) -> ModelType:
        db_obj = self.model(**{**obj_in, "owner_id": owner_id})
        db.add(db_obj)
        db.flush()
        return db_obj

    def save(self, db: Session, db_obj: ModelType) -> ModelType:
        db.add(db_obj)
        db.flush()
        return db_obj

    def soft_delete(self, db: Session, db_obj: ModelType) -> ModelType:
        """仅标记 ``is_deleted``，不物理删除行。"""
        db_obj.is_deleted = True
        db.add(db_obj)
        db.flush()
        return db_obj
