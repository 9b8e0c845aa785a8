"""物品模型：树中的叶子记录，必须归属某个容器。"""

from typing import List, Optional

from sqlalchemy import Boolean, CheckConstraint, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import expression

from app.packages.inventory.core.constants import MAX_SEGMENT_LENGTH
from app.packages.inventory.models.base import (
    Base,
    OwnedMixin,
    SoftDeleteMixin,
    TimestampMixin,
    item_tags,
)


class Item(OwnedMixin, TimestampMixin, SoftDeleteMixin, Base):
    """物品实体，``count`` 表示同类物品的数量。"""

    __tablename__ = "items"
    __table_args__ = (CheckConstraint("count >= 1", name="count_positive"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(MAX_SEGMENT_LENGTH), index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    count: Mapped[int] = mapped_column(Integer, default=1, server_default=expression.text("1"), nullable=False)
    # 不声明外键：孤儿物品检测依赖该列可能指向不存在的容器
    container_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    is_public: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=expression.false(), nullable=False
    )

    tags: Mapped[List["Tag"]] = relationship(
        "Tag",
        secondary=item_tags,
        lazy="selectin",
        order_by="Tag.name",
    )

    def __repr__(self) -> str:
        return f"<Item id={self.id} name={self.name!r} container_id={self.container_id}>"


# 同一容器内未删除物品名称唯一；已删除的物品不占用名称
Index(
    "uq_items_owner_container_name",
    Item.owner_id,
    Item.container_id,
    Item.name,
    unique=True,
    sqlite_where=Item.is_deleted.is_(False),
    postgresql_where=Item.is_deleted.is_(False),
)
