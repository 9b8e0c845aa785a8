"""容器相关的请求与响应模型。

路径与名称在这里完成边界归一化（去空白、小写、内部空白替换为 ``_``），
服务层拿到的已是规范形式。
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.packages.inventory.api.v1.schemas.common import ResponseEnvelope
from app.packages.inventory.utils.path_utils import normalize_pathname, normalize_segment


def _normalize_tags(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return None
    return [tag.strip() for tag in value if tag and tag.strip()]


def normalize_name(value: str) -> str:
    """单个路径段/物品名称：归一化后不能为空，也不能包含 '/'。"""
    if "/" in (value or ""):
        raise ValueError("名称不能包含 '/'")
    normalized = normalize_segment(value)
    if not normalized:
        raise ValueError("名称不能为空")
    return normalized


# ---------------------------------------------------------------------------
# 请求体
# ---------------------------------------------------------------------------


class ContainerEnsureRequest(BaseModel):
    """新建（或补齐）容器路径。"""

    pathname: str = Field(..., description="完整路径，例如 /garage/shelf_1/bin_a")
    is_public: Optional[bool] = Field(default=None, description="叶子容器是否公开")
    tags: Optional[List[str]] = Field(default=None, description="覆盖叶子容器的标签")

    @field_validator("pathname")
    @classmethod
    def _normalize_pathname(cls, value: str) -> str:
        return normalize_pathname(value)

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _normalize_tags(value)


class ContainerRenameRequest(BaseModel):
    name: str = Field(..., min_length=1, description="新的容器名称（单个路径段）")

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, value: str) -> str:
        return normalize_name(value)


class ContainerMoveRequest(BaseModel):
    pathname: str = Field(..., description="新的父容器路径，'/' 表示移动到根级")

    @field_validator("pathname")
    @classmethod
    def _normalize_pathname(cls, value: str) -> str:
        return normalize_pathname(value)


class ContainerUpdateRequest(BaseModel):
    is_public: Optional[bool] = None
    tags: Optional[List[str]] = None

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _normalize_tags(value)


# ---------------------------------------------------------------------------
# 响应体
# ---------------------------------------------------------------------------


class ContainerItem(BaseModel):
    id: int
    path: str
    parent_id: Optional[int] = None
    pathname: Optional[str] = None
    is_public: bool
    is_deleted: bool
    tags: List[str] = Field(default_factory=list)
    create_time: Optional[str] = None
    update_time: Optional[str] = None


class ItemSummary(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    count: int
    container_id: int
    pathname: Optional[str] = None
    is_public: bool
    is_deleted: bool
    tags: List[str] = Field(default_factory=list)
    create_time: Optional[str] = None
    update_time: Optional[str] = None


class DirectoryNodeItem(BaseModel):
    container: ContainerItem
    items: List[ItemSummary] = Field(default_factory=list)
    children: List["DirectoryNodeItem"] = Field(default_factory=list)


DirectoryNodeItem.model_rebuild()


class ContainerPathnamePayload(BaseModel):
    container_id: int
    pathname: str


class ContainerDeletionPayload(BaseModel):
    container_id: int
    moved_items: int
    destination_id: Optional[int] = None
    destination_pathname: Optional[str] = None


ContainerResponse = ResponseEnvelope[ContainerItem]
ContainerListResponse = ResponseEnvelope[List[ContainerItem]]
DirectoryTreeResponse = ResponseEnvelope[DirectoryNodeItem]
ContainerPathnameResponse = ResponseEnvelope[ContainerPathnamePayload]
ContainerDeletionResponse = ResponseEnvelope[ContainerDeletionPayload]
