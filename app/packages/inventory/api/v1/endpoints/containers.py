"""容器相关的路由定义。"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.packages.inventory.api.v1.schemas.containers import (
    ContainerDeletionResponse,
    ContainerEnsureRequest,
    ContainerListResponse,
    ContainerMoveRequest,
    ContainerPathnameResponse,
    ContainerRenameRequest,
    ContainerResponse,
    ContainerUpdateRequest,
    DirectoryTreeResponse,
)
from app.packages.inventory.core.constants import VIRTUAL_ROOT_ID
from app.packages.inventory.core.dependencies import get_current_owner_id, get_db
from app.packages.inventory.services.container_service import container_service
from app.packages.inventory.utils.path_utils import normalize_pathname, normalize_search_query

router = APIRouter(prefix="/containers", tags=["containers"])


@router.get("/tree", response_model=DirectoryTreeResponse)
def get_directory_tree(
    container_id: int = Query(VIRTUAL_ROOT_ID, alias="containerId", ge=0, description="起始容器，0 表示根"),
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> DirectoryTreeResponse:
    """返回以指定容器为根的完整目录树（容器、子容器与物品）。"""
    return container_service.get_directory_tree(db, owner_id=owner_id, container_id=container_id)


@router.get("/search", response_model=ContainerListResponse)
def search_containers(
    query: Optional[str] = Query("/", description="自动补全输入，例如 /garage/sh 或 /garage/"),
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ContainerListResponse:
    return container_service.search(db, owner_id=owner_id, query=normalize_search_query(query))


@router.get("/resolve", response_model=ContainerResponse)
def resolve_container(
    pathname: str = Query(..., description="完整路径"),
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ContainerResponse:
    """按路径查找已存在的容器，不会创建。"""
    return container_service.resolve(db, owner_id=owner_id, pathname=normalize_pathname(pathname))


@router.post("", response_model=ContainerResponse)
def ensure_container(
    payload: ContainerEnsureRequest,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ContainerResponse:
    """补齐路径上缺失的容器（已删除的会被恢复），返回叶子容器。"""
    return container_service.ensure_pathname(
        db,
        owner_id=owner_id,
        pathname=payload.pathname,
        is_public=payload.is_public,
        tags=payload.tags,
    )


@router.get("/{container_id}", response_model=ContainerResponse)
def get_container(
    container_id: int,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ContainerResponse:
    return container_service.get(db, owner_id=owner_id, container_id=container_id)


@router.get("/{container_id}/children", response_model=ContainerListResponse)
def list_children(
    container_id: int,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ContainerListResponse:
    return container_service.list_children(db, owner_id=owner_id, container_id=container_id)


@router.get("/{container_id}/pathname", response_model=ContainerPathnameResponse)
def get_pathname(
    container_id: int,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ContainerPathnameResponse:
    return container_service.get_pathname(db, owner_id=owner_id, container_id=container_id)


@router.put("/{container_id}/name", response_model=ContainerResponse)
def rename_container(
    container_id: int,
    payload: ContainerRenameRequest,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ContainerResponse:
    return container_service.rename(db, owner_id=owner_id, container_id=container_id, name=payload.name)


@router.post("/{container_id}/move", response_model=ContainerResponse)
def move_container(
    container_id: int,
    payload: ContainerMoveRequest,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ContainerResponse:
    """把容器及其子树移动到新的父路径下。"""
    return container_service.move(db, owner_id=owner_id, container_id=container_id, pathname=payload.pathname)


@router.patch("/{container_id}", response_model=ContainerResponse)
def update_container(
    container_id: int,
    payload: ContainerUpdateRequest,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ContainerResponse:
    return container_service.update(
        db,
        owner_id=owner_id,
        container_id=container_id,
        is_public=payload.is_public,
        tags=payload.tags,
    )


@router.delete("/{container_id}", response_model=ContainerDeletionResponse)
def delete_container(
    container_id: int,
    destination: Optional[str] = Query(
        None, alias="destinationPathname", description="容器非空时，物品的目标路径"
    ),
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> ContainerDeletionResponse:
    """软删除容器；容器中仍有物品时必须给出目标路径。"""
    destination_pathname = normalize_pathname(destination) if destination is not None else None
    return container_service.delete(
        db,
        owner_id=owner_id,
        container_id=container_id,
        destination_pathname=destination_pathname,
    )
