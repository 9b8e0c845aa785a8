"""物品 CRUD：物品存储协作方，提供按容器过滤、计数、批量改挂与孤儿检测。"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.packages.inventory.core.constants import VIRTUAL_ROOT_ID
from app.packages.inventory.core.exceptions import ConflictError
from app.packages.inventory.crud.base import CRUDBase
from app.packages.inventory.models import Container, Item


class CRUDItem(CRUDBase[Item]):
    def create_item(
        self,
        db: Session,
        *,
        owner_id: int,
        container_id: int,
        name: str,
        description: Optional[str] = None,
        count: int = 1,
        is_public: bool = False,
    ) -> Item:
        payload = {
            "container_id": container_id,
            "name": name,
            "description": description,
            "count": count,
            "is_public": is_public,
            "is_deleted": False,
        }
        try:
            with db.begin_nested():
                return self.create(db, payload, owner_id=owner_id)
        except IntegrityError as exc:
            raise ConflictError(
                f"该容器中已存在名为 '{name}' 的物品",
                data={"container_id": container_id, "name": name},
            ) from exc

    def get_all(
        self,
        db: Session,
        *,
        owner_id: int,
        container_id: Optional[int] = None,
        include_deleted: bool = False,
    ) -> List[Item]:
        """按容器过滤物品；``container_id`` 为空时返回所有者的全部物品。"""
        query = self.query(db, owner_id=owner_id, include_deleted=include_deleted)
        if container_id is not None:
            query = query.filter(Item.container_id == container_id)
        return query.order_by(Item.name.asc(), Item.id.asc()).all()

    def count(self, db: Session, *, owner_id: int, container_id: Optional[int] = None) -> int:
        query = self.query(db, owner_id=owner_id)
        if container_id is not None:
            query = query.filter(Item.container_id == container_id)
        return query.count()

    def update_item(
        self,
        db: Session,
        item_id: int,
        *,
        owner_id: int,
        changes: Dict[str, Any],
    ) -> Optional[Item]:
        """局部更新未删除的物品，``changes`` 中为 None 的字段保持原值。"""
        item = self.get(db, item_id, owner_id=owner_id)
        if item is None:
            return None
        try:
            with db.begin_nested():
                for field in ("name", "description", "count", "is_public", "container_id"):
                    value = changes.get(field)
                    if value is not None:
                        setattr(item, field, value)
                db.flush()
        except IntegrityError as exc:
            raise ConflictError(
                "目标容器中已存在同名物品",
                data={"item_id": item_id, **{k: v for k, v in changes.items() if v is not None}},
            ) from exc
        return item

    def soft_delete_by_id(self, db: Session, item_id: int, *, owner_id: int) -> bool:
        item = self.get(db, item_id, owner_id=owner_id)
        if item is None:
            return False
        self.soft_delete(db, item)
        return True

    def reassign(self, db: Session, item_ids: Iterable[int], *, owner_id: int, container_id: int) -> int:
        """把一批未删除物品改挂到 ``container_id``，返回受影响行数。"""
        ids = sorted({int(i) for i in item_ids})
        if not ids:
            return 0
        try:
            with db.begin_nested():
                affected = (
                    self.query(db, owner_id=owner_id)
                    .filter(Item.id.in_(ids))
                    .update({Item.container_id: container_id}, synchronize_session="fetch")
                )
        except IntegrityError as exc:
            raise ConflictError(
                "目标容器中已存在同名物品",
                data={"item_ids": ids, "container_id": container_id},
            ) from exc
        return affected

    def list_orphaned(self, db: Session, *, owner_id: int) -> List[Item]:
        """返回 container_id 不对应该所有者任何容器行（含已删除行）的未删除物品。"""
        owned_container_ids = select(Container.id).where(Container.owner_id == owner_id)
        return (
            self.query(db, owner_id=owner_id)
            .filter(Item.container_id != VIRTUAL_ROOT_ID)
            .filter(Item.container_id.not_in(owned_container_ids))
            .order_by(Item.id.asc())
            .all()
        )


item_crud = CRUDItem(Item)
