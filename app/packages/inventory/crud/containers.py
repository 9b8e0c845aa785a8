"""容器 CRUD：按 (path, parent, owner) 定位节点，负责创建、复用与软删除。"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.packages.inventory.core.constants import VIRTUAL_ROOT_ID
from app.packages.inventory.core.exceptions import ConflictError, TreeIntegrityError
from app.packages.inventory.core.logger import logger
from app.packages.inventory.crud.base import CRUDBase
from app.packages.inventory.models import Container


def _db_parent_id(parent_id: Optional[int]) -> Optional[int]:
    """虚拟根（0）在库中以 NULL 表示。"""
    return None if parent_id in (None, VIRTUAL_ROOT_ID) else parent_id


class CRUDContainer(CRUDBase[Container]):
    """提供容器树相关的查询与变更，全部按所有者隔离。"""

    @staticmethod
    def _parent_clause(parent_id: Optional[int]):
        db_parent = _db_parent_id(parent_id)
        if db_parent is None:
            return Container.parent_id.is_(None)
        return Container.parent_id == db_parent

    def find_by_path_and_parent(
        self,
        db: Session,
        *,
        owner_id: int,
        path: str,
        parent_id: Optional[int],
        include_deleted: bool = False,
    ) -> Optional[Container]:
        return (
            self.query(db, owner_id=owner_id, include_deleted=include_deleted)
            .filter(Container.path == path)
            .filter(self._parent_clause(parent_id))
            .first()
        )

    def create_node(self, db: Session, *, owner_id: int, path: str, parent_id: Optional[int]) -> Container:
        """插入新的未删除容器；槽位已被占用时抛出 ``ConflictError``。"""
        try:
            with db.begin_nested():
                return self.create(
                    db,
                    {"path": path, "parent_id": _db_parent_id(parent_id), "is_deleted": False},
                    owner_id=owner_id,
                )
        except IntegrityError as exc:
            raise ConflictError(
                f"容器 '{path}' 已存在",
                data={"path": path, "parent_id": _db_parent_id(parent_id)},
            ) from exc

    def get_or_create(self, db: Session, *, owner_id: int, path: str, parent_id: Optional[int]) -> Container:
        """返回未删除的同名容器；命中已删除的行则取消删除；否则新建。

        插入发生在 SAVEPOINT 中：并发调用者抢先插入同一槽位时，回滚保存点并
        重新读取一次，所有调用者最终收敛到同一行。
        """
        existing = self.find_by_path_and_parent(
            db, owner_id=owner_id, path=path, parent_id=parent_id, include_deleted=True
        )
        if existing is None:
            try:
                return self.create_node(db, owner_id=owner_id, path=path, parent_id=parent_id)
            except ConflictError:
                logger.info(
                    "containers.get_or_create.retry owner=%s parent=%s path=%s", owner_id, parent_id, path
                )
                existing = self.find_by_path_and_parent(
                    db, owner_id=owner_id, path=path, parent_id=parent_id, include_deleted=True
                )
                if existing is None:
                    raise

        if existing.is_deleted:
            existing.is_deleted = False
            self.save(db, existing)
            logger.info("containers.undelete owner=%s id=%s path=%s", owner_id, existing.id, path)
        return existing

    def get_children(
        self,
        db: Session,
        *,
        owner_id: int,
        parent_id: Optional[int],
        include_deleted: bool = False,
    ) -> List[Container]:
        """列出直接子容器；``parent_id`` 为 None 或 0 时返回根级容器。"""
        return (
            self.query(db, owner_id=owner_id, include_deleted=include_deleted)
            .filter(self._parent_clause(parent_id))
            .order_by(Container.path.asc(), Container.id.asc())
            .all()
        )

    def search_by_parent_and_prefix(
        self,
        db: Session,
        *,
        owner_id: int,
        parent_id: Optional[int],
        prefix: Optional[str],
        limit: int = 10,
    ) -> List[Container]:
        """在指定父容器下按名称做不区分大小写的子串匹配，结果数量受限。"""
        query = self.query(db, owner_id=owner_id).filter(self._parent_clause(parent_id))
        if prefix:
            query = query.filter(func.lower(Container.path).contains(prefix.lower(), autoescape=True))
        return query.order_by(Container.path.asc(), Container.id.asc()).limit(limit).all()

    def update_node(
        self,
        db: Session,
        container_id: int,
        *,
        owner_id: int,
        path: Optional[str] = None,
        parent_id: Optional[int] = None,
        is_public: Optional[bool] = None,
        undelete: bool = False,
    ) -> Optional[Container]:
        """局部更新：仅修改显式传入的字段；``parent_id=0`` 表示移动到根级。"""
        container = self.get(db, container_id, owner_id=owner_id, include_deleted=True)
        if container is None:
            return None

        try:
            with db.begin_nested():
                if path is not None:
                    container.path = path
                if parent_id is not None:
                    container.parent_id = _db_parent_id(parent_id)
                if is_public is not None:
                    container.is_public = is_public
                if undelete:
                    container.is_deleted = False
                db.flush()
        except IntegrityError as exc:
            raise ConflictError(
                "目标位置已存在同名容器",
                data={"container_id": container_id, "path": path, "parent_id": parent_id},
            ) from exc
        return container

    def soft_delete_by_id(self, db: Session, container_id: int, *, owner_id: int) -> bool:
        container = self.get(db, container_id, owner_id=owner_id, include_deleted=True)
        if container is None:
            return False
        self.soft_delete(db, container)
        return True

    def list_ancestors(
        self,
        db: Session,
        container_id: int,
        *,
        owner_id: int,
        max_depth: int,
    ) -> List[Container]:
        """从指定容器向上走到根级，返回 [自身, 父, 祖父, ...]（包含已删除的行）。

        容器不存在时返回空列表；链路长度超过 ``max_depth`` 视为数据损坏。
        """
        chain: List[Container] = []
        current_id: Optional[int] = container_id
        while current_id is not None:
            if len(chain) >= max_depth:
                raise TreeIntegrityError(data={"container_id": container_id, "max_depth": max_depth})
            node = self.get(db, current_id, owner_id=owner_id, include_deleted=True)
            if node is None:
                # 父链中断：返回已走过的部分，由调用方判断
                return chain
            chain.append(node)
            current_id = node.parent_id
        return chain

    def subtree_height(self, db: Session, container_id: int, *, owner_id: int, max_depth: int) -> int:
        """以容器自身为第 1 层，返回其子树的层数（包含已删除的后代）。"""
        height = 0
        frontier = [container_id]
        while frontier:
            height += 1
            if height > max_depth:
                raise TreeIntegrityError(data={"container_id": container_id, "max_depth": max_depth})
            rows = (
                self.query(db, owner_id=owner_id, include_deleted=True)
                .filter(Container.parent_id.in_(frontier))
                .with_entities(Container.id)
                .all()
            )
            frontier = [row.id for row in rows]
        return height


container_crud = CRUDContainer(Container)
