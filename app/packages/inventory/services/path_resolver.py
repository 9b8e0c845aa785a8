"""路径解析服务：在容器树上解析、补全与搜索斜杠分隔的路径。

- resolve_existing：只读地逐段向下查找，任意一段缺失即返回 None；
- ensure_pathname：逐段 get_or_create，沿途补齐（必要时取消删除）祖先容器；
- search：按自动补全的三种形态列出候选容器；
- get_pathname：从容器沿父链回溯到根，拼出完整路径。

所有方法都显式接收 ``owner_id``，虚拟根（id=0）按需合成且从不访问存储。
"""

from __future__ import annotations

from typing import List, Optional, Union

from sqlalchemy.orm import Session

from app.packages.inventory.core.config import get_settings
from app.packages.inventory.core.constants import VIRTUAL_ROOT_ID
from app.packages.inventory.core.exceptions import ValidationError
from app.packages.inventory.crud.containers import container_crud
from app.packages.inventory.models import Container, virtual_root
from app.packages.inventory.utils.path_utils import (
    ContainerPath,
    format_path,
    split_search_query,
    validate_segment,
)

PathLike = Union[str, ContainerPath, None]


def _as_path(path: PathLike) -> ContainerPath:
    return path if isinstance(path, ContainerPath) else ContainerPath.parse(path)


class PathResolver:
    def resolve_existing(self, db: Session, *, owner_id: int, path: PathLike) -> Optional[Container]:
        target = _as_path(path)
        current = virtual_root(owner_id)
        for segment in target.segments:
            current = container_crud.find_by_path_and_parent(
                db, owner_id=owner_id, path=segment, parent_id=current.id
            )
            if current is None:
                return None
        return current

    def ensure_pathname(self, db: Session, *, owner_id: int, path: PathLike) -> Container:
        """确保路径上的每一段都存在且未删除，返回叶子容器。

        幂等：重复调用返回同一行；根路径直接返回虚拟根。调用方负责事务提交。
        """
        target = _as_path(path)
        self._validate(target)
        current = virtual_root(owner_id)
        for segment in target.segments:
            current = container_crud.get_or_create(db, owner_id=owner_id, path=segment, parent_id=current.id)
        return current

    def search(self, db: Session, *, owner_id: int, query: Optional[str]) -> List[Container]:
        # 搜索绝不自动创建父路径
        parent_path, term = split_search_query(query)
        parent = self.resolve_existing(db, owner_id=owner_id, path=parent_path)
        if parent is None:
            return []
        return container_crud.search_by_parent_and_prefix(
            db,
            owner_id=owner_id,
            parent_id=parent.id,
            prefix=term,
            limit=get_settings().search_page_size,
        )

    def get_pathname(self, db: Session, *, owner_id: int, container_id: int) -> Optional[str]:
        """返回容器的完整路径；容器不存在（或父链断裂）时返回 None。"""
        if container_id == VIRTUAL_ROOT_ID:
            return "/"
        chain = container_crud.list_ancestors(
            db, container_id, owner_id=owner_id, max_depth=get_settings().max_tree_depth
        )
        if not chain or chain[-1].parent_id is not None:
            return None
        return format_path(node.path for node in reversed(chain))

    def is_same_or_descendant(self, db: Session, *, owner_id: int, container_id: int, ancestor_id: int) -> bool:
        """判断 ``container_id`` 是否为 ``ancestor_id`` 本身或其后代。"""
        if ancestor_id == VIRTUAL_ROOT_ID:
            return True
        if container_id == VIRTUAL_ROOT_ID:
            return False
        chain = container_crud.list_ancestors(
            db, container_id, owner_id=owner_id, max_depth=get_settings().max_tree_depth
        )
        return any(node.id == ancestor_id for node in chain)

    @staticmethod
    def _validate(target: ContainerPath) -> None:
        max_depth = get_settings().max_tree_depth
        if len(target) > max_depth:
            raise ValidationError(f"路径层级不能超过 {max_depth} 级", data={"pathname": str(target)})
        for segment in target.segments:
            validate_segment(segment)


path_resolver = PathResolver()
