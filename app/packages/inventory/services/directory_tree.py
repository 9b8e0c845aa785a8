"""目录树构建：从给定容器出发递归组装 容器 + 子容器 + 物品。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List

from sqlalchemy.orm import Session

from app.packages.inventory.core.config import get_settings
from app.packages.inventory.core.constants import VIRTUAL_ROOT_ID
from app.packages.inventory.core.exceptions import NotFoundError, TreeIntegrityError
from app.packages.inventory.crud.containers import container_crud
from app.packages.inventory.crud.items import item_crud
from app.packages.inventory.models import Container, Item, virtual_root


@dataclass
class DirectoryNode:
    """响应用的临时节点，不持久化，每次请求重新构建。"""

    container: Container
    items: List[Item] = field(default_factory=list)
    children: List["DirectoryNode"] = field(default_factory=list)

    def walk(self) -> Iterator["DirectoryNode"]:
        """深度优先（先序）遍历整棵子树。"""
        yield self
        for child in self.children:
            yield from child.walk()


class DirectoryTreeBuilder:
    def build_tree(self, db: Session, *, owner_id: int, root: Container) -> DirectoryNode:
        return self._build(db, owner_id, root, depth=0, max_depth=get_settings().max_tree_depth, seen=set())

    def build_tree_for(self, db: Session, *, owner_id: int, container_id: int) -> DirectoryNode:
        if container_id == VIRTUAL_ROOT_ID:
            root = virtual_root(owner_id)
        else:
            root = container_crud.get(db, container_id, owner_id=owner_id)
            if root is None:
                raise NotFoundError("容器不存在或已删除", data={"container_id": container_id})
        return self.build_tree(db, owner_id=owner_id, root=root)

    def _build(
        self,
        db: Session,
        owner_id: int,
        container: Container,
        *,
        depth: int,
        max_depth: int,
        seen: set[int],
    ) -> DirectoryNode:
        # 正常数据不会成环；超出深度或重复访问都按数据损坏处理
        if depth > max_depth or container.id in seen:
            raise TreeIntegrityError(data={"container_id": container.id, "depth": depth})
        seen.add(container.id)

        node = DirectoryNode(
            container=container,
            items=item_crud.get_all(db, owner_id=owner_id, container_id=container.id),
        )
        for child in container_crud.get_children(db, owner_id=owner_id, parent_id=container.id):
            node.children.append(
                self._build(db, owner_id, child, depth=depth + 1, max_depth=max_depth, seen=seen)
            )
        return node


directory_tree_builder = DirectoryTreeBuilder()
