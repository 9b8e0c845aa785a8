"""物品相关的请求与响应模型。"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.packages.inventory.api.v1.schemas.common import ResponseEnvelope
from app.packages.inventory.api.v1.schemas.containers import ItemSummary, normalize_name
from app.packages.inventory.utils.path_utils import normalize_pathname


class ItemFieldsMixin(BaseModel):
    @field_validator("name", check_fields=False)
    @classmethod
    def _normalize_name(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else normalize_name(value)

    @field_validator("pathname", check_fields=False)
    @classmethod
    def _normalize_pathname(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else normalize_pathname(value)

    @field_validator("description", check_fields=False)
    @classmethod
    def _normalize_description(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("tags", check_fields=False)
    @classmethod
    def _normalize_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        return [tag.strip() for tag in value if tag and tag.strip()]


class ItemCreateRequest(ItemFieldsMixin):
    name: str = Field(..., min_length=1)
    pathname: str = Field(..., description="所在容器的完整路径，不存在时自动创建")
    description: Optional[str] = None
    count: int = Field(default=1, ge=1)
    is_public: bool = False
    tags: Optional[List[str]] = None


class ItemUpdateRequest(ItemFieldsMixin):
    name: Optional[str] = Field(default=None, min_length=1)
    pathname: Optional[str] = Field(default=None, description="给出时把物品改挂到该路径")
    description: Optional[str] = None
    count: Optional[int] = Field(default=None, ge=1)
    is_public: Optional[bool] = None
    tags: Optional[List[str]] = None


class ItemMoveRequest(BaseModel):
    """把源容器中的全部物品移动到目标路径。"""

    container_id: int = Field(..., ge=0)
    pathname: str

    @field_validator("pathname")
    @classmethod
    def _normalize_pathname(cls, value: str) -> str:
        return normalize_pathname(value)


class OrphanedItemMoveRequest(BaseModel):
    item_ids: List[int] = Field(default_factory=list)
    pathname: str

    @field_validator("pathname")
    @classmethod
    def _normalize_pathname(cls, value: str) -> str:
        return normalize_pathname(value)


class OrphanedItemPayload(BaseModel):
    id: int
    name: str


class MovePayload(BaseModel):
    moved: bool


class ItemDeletionPayload(BaseModel):
    item_id: int


ItemResponse = ResponseEnvelope[ItemSummary]
ItemListResponse = ResponseEnvelope[List[ItemSummary]]
OrphanedItemListResponse = ResponseEnvelope[List[OrphanedItemPayload]]
MoveResponse = ResponseEnvelope[MovePayload]
ItemDeletionResponse = ResponseEnvelope[ItemDeletionPayload]
