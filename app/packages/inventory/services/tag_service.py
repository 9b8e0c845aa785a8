"""标签服务：标签检索以及为容器/物品整体替换标签。"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from sqlalchemy.orm import Session

from app.packages.inventory.core.responses import create_response
from app.packages.inventory.crud.tags import tag_crud
from app.packages.inventory.models import Container, Item


class TagService:
    def search(self, db: Session, *, owner_id: int, keyword: Optional[str] = None) -> Dict[str, Any]:
        tags = tag_crud.search(db, owner_id=owner_id, keyword=keyword or "")
        data = [{"id": tag.id, "name": tag.name} for tag in tags]
        return create_response("获取标签成功", data)

    def replace_tags(self, db: Session, *, owner_id: int, target: Container | Item, names: Iterable[str]) -> None:
        """以 ``names`` 覆盖目标现有标签；调用方负责事务。"""
        target.tags = tag_crud.get_or_create_many(db, owner_id=owner_id, names=names)
        db.flush()


tag_service = TagService()
