"""标签 CRUD：按所有者维护标签字符串。"""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.packages.inventory.crud.base import CRUDBase
from app.packages.inventory.models import Tag


class CRUDTag(CRUDBase[Tag]):
    def get_by_name(self, db: Session, *, owner_id: int, name: str) -> Optional[Tag]:
        return self.query(db, owner_id=owner_id).filter(Tag.name == name).first()

    def get_or_create(self, db: Session, *, owner_id: int, name: str) -> Tag:
        existing = self.get_by_name(db, owner_id=owner_id, name=name)
        if existing is not None:
            return existing
        try:
            with db.begin_nested():
                return self.create(db, {"name": name}, owner_id=owner_id)
        except IntegrityError:
            existing = self.get_by_name(db, owner_id=owner_id, name=name)
            if existing is None:
                raise
            return existing

    def get_or_create_many(self, db: Session, *, owner_id: int, names: Iterable[str]) -> List[Tag]:
        """去重、去空白后逐个获取或创建，保持首次出现的顺序。"""
        seen: dict[str, None] = {}
        for raw in names or ():
            name = (raw or "").strip()
            if name:
                seen.setdefault(name, None)
        return [self.get_or_create(db, owner_id=owner_id, name=name) for name in seen]

    def search(self, db: Session, *, owner_id: int, keyword: str, limit: int = 20) -> List[Tag]:
        """名称子串匹配，完全相同的标签排在最前。"""
        term = (keyword or "").strip()
        query = self.query(db, owner_id=owner_id)
        if term:
            query = query.filter(func.lower(Tag.name).contains(term.lower(), autoescape=True))
            exact_first = case((Tag.name == term, 0), else_=1)
            query = query.order_by(exact_first, Tag.name.asc())
        else:
            query = query.order_by(Tag.name.asc())
        return query.limit(limit).all()


tag_crud = CRUDTag(Tag)
