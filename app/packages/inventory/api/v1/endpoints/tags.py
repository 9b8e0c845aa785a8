"""标签相关的路由定义。"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.packages.inventory.api.v1.schemas.tags import TagListResponse
from app.packages.inventory.core.dependencies import get_current_owner_id, get_db
from app.packages.inventory.services.tag_service import tag_service

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/search", response_model=TagListResponse)
def search_tags(
    query: Optional[str] = Query(None, description="标签名称关键字"),
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_owner_id),
) -> TagListResponse:
    """按名称检索标签，完全匹配的排在最前。"""
    return tag_service.search(db, owner_id=owner_id, keyword=query)
