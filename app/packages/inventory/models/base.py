"""模型基类：声明式基类、所有者/审计/软删除字段，以及标签关联表。

所有业务表都带 ``owner_id``；容器与物品只做软删除，行本身永久保留。
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, MetaData, Table, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import expression

# 约束命名与迁移脚本保持一致
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class OwnedMixin:
    # 所有读写都必须带 owner_id 过滤，不允许跨所有者访问
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)


class TimestampMixin:
    """``create_time``/``update_time`` 由数据库时钟填充。"""

    create_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    update_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class SoftDeleteMixin:
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=expression.false(), index=True
    )


def _tag_link_table(name: str, target_column: str, target_table: str) -> Table:
    """标签多对多关联表；标签对容器树核心逻辑是透明的附加信息。"""
    return Table(
        name,
        Base.metadata,
        Column(target_column, Integer, ForeignKey(f"{target_table}.id"), primary_key=True),
        Column("tag_id", Integer, ForeignKey("tags.id"), primary_key=True, index=True),
        Column("create_time", DateTime(timezone=True), server_default=func.now(), nullable=False),
    )


container_tags = _tag_link_table("container_tags", "container_id", "containers")
item_tags = _tag_link_table("item_tags", "item_id", "items")
