"""标签模型：按所有者隔离的标签字符串。"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.packages.inventory.core.constants import MAX_SEGMENT_LENGTH
from app.packages.inventory.models.base import Base, OwnedMixin, TimestampMixin


class Tag(OwnedMixin, TimestampMixin, Base):
    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("owner_id", "name", name="uq_tags_owner_name"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(MAX_SEGMENT_LENGTH), index=True)
