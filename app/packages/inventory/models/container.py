"""容器模型：物品的存放位置，按 `parent_id` 形成树。

存储规则：
- path：单个路径段（basename），不含 '/'，在边界层已完成小写与空白归一化；
- parent_id：为空表示根级容器；虚拟根（id=0, path='/'）不入库；
- 同一所有者、同一父节点下 path 唯一。软删除的行保留槽位，再次创建时复用并取消删除。
"""

from typing import List, Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import expression

from app.packages.inventory.core.constants import MAX_SEGMENT_LENGTH, VIRTUAL_ROOT_ID, VIRTUAL_ROOT_PATH
from app.packages.inventory.models.base import (
    Base,
    OwnedMixin,
    SoftDeleteMixin,
    TimestampMixin,
    container_tags,
)


class Container(OwnedMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "containers"
    __table_args__ = (
        UniqueConstraint("owner_id", "parent_id", "path", name="uq_containers_owner_parent_path"),
        # NULL 在普通唯一约束中互不相等，根级容器需要单独的部分唯一索引
        Index(
            "uq_containers_owner_root_path",
            "owner_id",
            "path",
            unique=True,
            sqlite_where=text("parent_id IS NULL"),
            postgresql_where=text("parent_id IS NULL"),
        ),
        CheckConstraint("parent_id IS NULL OR parent_id <> id", name="no_self_parent"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    path: Mapped[str] = mapped_column(String(MAX_SEGMENT_LENGTH), index=True)
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("containers.id"), nullable=True, index=True
    )
    is_public: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=expression.false(), nullable=False
    )

    tags: Mapped[List["Tag"]] = relationship(
        "Tag",
        secondary=container_tags,
        lazy="selectin",
        order_by="Tag.name",
    )

    @property
    def is_virtual_root(self) -> bool:
        return self.id == VIRTUAL_ROOT_ID

    def __repr__(self) -> str:
        return f"<Container id={self.id} path={self.path!r} parent_id={self.parent_id}>"


def virtual_root(owner_id: int) -> Container:
    """合成虚拟根容器：不加入会话，也从不写入数据库。"""
    return Container(
        id=VIRTUAL_ROOT_ID,
        path=VIRTUAL_ROOT_PATH,
        parent_id=None,
        owner_id=owner_id,
        is_deleted=False,
        is_public=True,
    )
