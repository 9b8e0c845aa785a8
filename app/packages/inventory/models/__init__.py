"""模型包初始化，便于统一导入 ORM 实体并触发模型注册。"""

from app.packages.inventory.models.container import Container, virtual_root
from app.packages.inventory.models.item import Item
from app.packages.inventory.models.tag import Tag

__all__ = [
    "Container",
    "Item",
    "Tag",
    "virtual_root",
]
