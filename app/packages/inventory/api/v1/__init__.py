"""API v1 汇总路由：统一挂载所有版本化的子路由。"""

from fastapi import APIRouter

from app.packages.inventory.api.v1.endpoints import containers, items, tags

api_router = APIRouter()
api_router.include_router(containers.router)
api_router.include_router(items.router)
api_router.include_router(tags.router)
