"""物品相关的路由定义。"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.packages.inventory.api.v1.schemas.items import (
    ItemCreateRequest,
    ItemDeletionResponse,
    ItemListResponse,
    ItemMoveRequest,
    ItemResponse,
    ItemUpdateRequest,
    MoveResponse,
    OrphanedItemListResponse,
    OrphanedItemMoveRequest,
)
from app.packages.inventory.core.dependencies import get_current_owner_id, get_db
from app.packages.inventory.services.item_service import item_service

router = APIRouter(prefix="/items", tags=["items"])


@router.get("", response_model=ItemListResponse)
def list_items(
    container_id: Optional[int] = Query(None, alias="containerId", ge=0, description="按容器过滤"),
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ItemListResponse:
    return item_service.list(db, owner_id=owner_id, container_id=container_id)


@router.post("", response_model=ItemResponse)
def create_item(
    payload: ItemCreateRequest,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ItemResponse:
    """在指定路径下创建物品，路径中缺失的容器会被自动创建。"""
    return item_service.create(
        db,
        owner_id=owner_id,
        name=payload.name,
        pathname=payload.pathname,
        description=payload.description,
        count=payload.count,
        is_public=payload.is_public,
        tags=payload.tags,
    )


@router.get("/orphaned", response_model=OrphanedItemListResponse)
def list_orphaned_items(
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> OrphanedItemListResponse:
    """列出所在容器已不存在的物品。"""
    return item_service.orphaned(db, owner_id=owner_id)


@router.post("/orphaned/move", response_model=MoveResponse)
def move_orphaned_items(
    payload: OrphanedItemMoveRequest,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> MoveResponse:
    return item_service.move_orphaned(db, owner_id=owner_id, item_ids=payload.item_ids, pathname=payload.pathname)


@router.post("/move", response_model=MoveResponse)
def move_items(
    payload: ItemMoveRequest,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> MoveResponse:
    """把源容器中的全部物品移动到目标路径。"""
    return item_service.move_items(
        db, owner_id=owner_id, source_id=payload.container_id, pathname=payload.pathname
    )


@router.get("/{item_id}", response_model=ItemResponse)
def get_item(
    item_id: int,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ItemResponse:
    return item_service.get(db, owner_id=owner_id, item_id=item_id)


@router.patch("/{item_id}", response_model=ItemResponse)
def update_item(
    item_id: int,
    payload: ItemUpdateRequest,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ItemResponse:
    return item_service.update(
        db,
        owner_id=owner_id,
        item_id=item_id,
        name=payload.name,
        pathname=payload.pathname,
        description=payload.description,
        count=payload.count,
        is_public=payload.is_public,
        tags=payload.tags,
    )


@router.delete("/{item_id}", response_model=ItemDeletionResponse)
def delete_item(
    item_id: int,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ItemDeletionResponse:
    return item_service.delete(db, owner_id=owner_id, item_id=item_id)
