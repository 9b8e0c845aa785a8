"""容器、物品与目录树的响应序列化。"""

from __future__ import annotations

from typing import Any, Dict, Optional

from app.packages.inventory.core.timezone import format_datetime
from app.packages.inventory.models import Container, Item
from app.packages.inventory.services.directory_tree import DirectoryNode


def join_pathname(parent_pathname: str, name: str) -> str:
    return f"/{name}" if parent_pathname == "/" else f"{parent_pathname}/{name}"


def serialize_container(container: Container, pathname: Optional[str] = None) -> Dict[str, Any]:
    # 对外统一用 0 表示位于虚拟根下；虚拟根自身没有父节点
    parent_id = None if container.is_virtual_root else (container.parent_id or 0)
    return {
        "id": container.id,
        "path": container.path,
        "parent_id": parent_id,
        "pathname": pathname,
        "is_public": bool(container.is_public),
        "is_deleted": bool(container.is_deleted),
        "tags": [tag.name for tag in container.tags],
        "create_time": format_datetime(container.create_time),
        "update_time": format_datetime(container.update_time),
    }


def serialize_item(item: Item, pathname: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "count": item.count,
        "container_id": item.container_id,
        "pathname": pathname,
        "is_public": bool(item.is_public),
        "is_deleted": bool(item.is_deleted),
        "tags": [tag.name for tag in item.tags],
        "create_time": format_datetime(item.create_time),
        "update_time": format_datetime(item.update_time),
    }


def serialize_tree(node: DirectoryNode, pathname: str) -> Dict[str, Any]:
    """递归序列化目录树，子节点路径由父路径拼接得到，不再逐个查询。"""
    return {
        "container": serialize_container(node.container, pathname),
        "items": [serialize_item(item, pathname) for item in node.items],
        "children": [
            serialize_tree(child, join_pathname(pathname, child.container.path)) for child in node.children
        ],
    }
