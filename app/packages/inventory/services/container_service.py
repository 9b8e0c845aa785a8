"""容器服务：对外暴露容器树的查询与变更，组合路径解析、目录树与物品迁移。"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from sqlalchemy.orm import Session

from app.packages.inventory.core.config import get_settings
from app.packages.inventory.core.constants import VIRTUAL_ROOT_ID
from app.packages.inventory.core.exceptions import (
    ConflictError,
    InvalidOperationError,
    NotFoundError,
    ValidationError,
)
from app.packages.inventory.core.logger import logger
from app.packages.inventory.core.responses import create_response
from app.packages.inventory.crud.containers import container_crud
from app.packages.inventory.db.session import atomic
from app.packages.inventory.models import Container, virtual_root
from app.packages.inventory.services.directory_tree import directory_tree_builder
from app.packages.inventory.services.item_relocator import item_relocator
from app.packages.inventory.services.path_resolver import path_resolver
from app.packages.inventory.services.serializers import join_pathname, serialize_container, serialize_tree
from app.packages.inventory.services.tag_service import tag_service
from app.packages.inventory.utils.path_utils import validate_segment


class ContainerService:
    """封装容器相关的业务逻辑，每个变更方法是一个独立事务。"""

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def get(self, db: Session, *, owner_id: int, container_id: int) -> Dict[str, Any]:
        container = self._get_live(db, owner_id=owner_id, container_id=container_id)
        return create_response("获取容器成功", self._serialize(db, owner_id, container))

    def resolve(self, db: Session, *, owner_id: int, pathname: Optional[str]) -> Dict[str, Any]:
        """按完整路径查找容器，不做任何创建。"""
        container = path_resolver.resolve_existing(db, owner_id=owner_id, path=pathname)
        if container is None:
            raise NotFoundError("容器不存在或已删除", data={"pathname": pathname})
        return create_response("获取容器成功", self._serialize(db, owner_id, container))

    def list_children(self, db: Session, *, owner_id: int, container_id: int) -> Dict[str, Any]:
        parent = self._get_live(db, owner_id=owner_id, container_id=container_id)
        parent_pathname = path_resolver.get_pathname(db, owner_id=owner_id, container_id=parent.id) or "/"
        children = container_crud.get_children(db, owner_id=owner_id, parent_id=parent.id)
        data = [
            serialize_container(child, join_pathname(parent_pathname, child.path)) for child in children
        ]
        return create_response("获取子容器成功", data)

    def get_directory_tree(self, db: Session, *, owner_id: int, container_id: int = VIRTUAL_ROOT_ID) -> Dict[str, Any]:
        tree = directory_tree_builder.build_tree_for(db, owner_id=owner_id, container_id=container_id)
        pathname = path_resolver.get_pathname(db, owner_id=owner_id, container_id=tree.container.id) or "/"
        return create_response("获取目录树成功", serialize_tree(tree, pathname))

    def search(self, db: Session, *, owner_id: int, query: Optional[str]) -> Dict[str, Any]:
        """自动补全：``/`` 列出根级，``/a/`` 列出 a 的子容器，``/a/b`` 过滤 a 下名称含 b 的容器。"""
        matches = path_resolver.search(db, owner_id=owner_id, query=query)
        data = [self._serialize(db, owner_id, container) for container in matches]
        return create_response("搜索容器成功", data)

    def get_pathname(self, db: Session, *, owner_id: int, container_id: int) -> Dict[str, Any]:
        pathname = path_resolver.get_pathname(db, owner_id=owner_id, container_id=container_id)
        if pathname is None:
            raise NotFoundError("容器不存在或已删除", data={"container_id": container_id})
        return create_response("获取容器路径成功", {"container_id": container_id, "pathname": pathname})

    # ------------------------------------------------------------------
    # 变更
    # ------------------------------------------------------------------

    def ensure_pathname(
        self,
        db: Session,
        *,
        owner_id: int,
        pathname: Optional[str],
        is_public: Optional[bool] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """确保路径存在（沿途补齐祖先），可同时设置叶子容器的公开状态与标签。"""
        with atomic(db):
            container = path_resolver.ensure_pathname(db, owner_id=owner_id, path=pathname)
            if not container.is_virtual_root:
                if is_public is not None:
                    container_crud.update_node(db, container.id, owner_id=owner_id, is_public=is_public)
                if tags is not None:
                    tag_service.replace_tags(db, owner_id=owner_id, target=container, names=tags)
        logger.info("containers.ensure owner=%s id=%s pathname=%s", owner_id, container.id, pathname)
        return create_response("创建容器成功", self._serialize(db, owner_id, container))

    def rename(self, db: Session, *, owner_id: int, container_id: int, name: str) -> Dict[str, Any]:
        self._reject_root(container_id, "根容器不可重命名")
        validate_segment(name)
        with atomic(db):
            container = self._get_live(db, owner_id=owner_id, container_id=container_id)
            if container.path != name:
                self._ensure_slot_free(db, owner_id=owner_id, name=name, parent_id=container.parent_id)
                container_crud.update_node(db, container.id, owner_id=owner_id, path=name)
        logger.info("containers.rename owner=%s id=%s name=%s", owner_id, container_id, name)
        return create_response("重命名容器成功", self._serialize(db, owner_id, container))

    def move(self, db: Session, *, owner_id: int, container_id: int, pathname: Optional[str]) -> Dict[str, Any]:
        """把容器（连同整棵子树）移动到 ``pathname`` 之下，目标路径按需创建。"""
        self._reject_root(container_id, "根容器不可移动")
        with atomic(db):
            container = self._get_live(db, owner_id=owner_id, container_id=container_id)
            destination = path_resolver.ensure_pathname(db, owner_id=owner_id, path=pathname)
            if path_resolver.is_same_or_descendant(
                db, owner_id=owner_id, container_id=destination.id, ancestor_id=container.id
            ):
                raise InvalidOperationError(
                    "不能把容器移动到自身或其子容器之下",
                    data={"container_id": container_id, "pathname": pathname},
                )
            if (container.parent_id or VIRTUAL_ROOT_ID) != destination.id:
                self._ensure_slot_free(db, owner_id=owner_id, name=container.path, parent_id=destination.id)
                self._ensure_depth_fits(db, owner_id=owner_id, container=container, destination=destination)
                container_crud.update_node(db, container.id, owner_id=owner_id, parent_id=destination.id)
        logger.info("containers.move owner=%s id=%s destination=%s", owner_id, container_id, destination.id)
        return create_response("移动容器成功", self._serialize(db, owner_id, container))

    def update(
        self,
        db: Session,
        *,
        owner_id: int,
        container_id: int,
        is_public: Optional[bool] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """更新公开状态与标签，未传入的字段保持不变。"""
        self._reject_root(container_id, "根容器不可修改")
        with atomic(db):
            container = self._get_live(db, owner_id=owner_id, container_id=container_id)
            if is_public is not None:
                container_crud.update_node(db, container.id, owner_id=owner_id, is_public=is_public)
            if tags is not None:
                tag_service.replace_tags(db, owner_id=owner_id, target=container, names=tags)
        return create_response("更新容器成功", self._serialize(db, owner_id, container))

    def delete(
        self,
        db: Session,
        *,
        owner_id: int,
        container_id: int,
        destination_pathname: Optional[str] = None,
    ) -> Dict[str, Any]:
        result = item_relocator.delete_container(
            db,
            owner_id=owner_id,
            container_id=container_id,
            destination_pathname=destination_pathname,
        )
        destination = None
        if result.destination_id is not None:
            destination = path_resolver.get_pathname(db, owner_id=owner_id, container_id=result.destination_id)
        payload = {
            "container_id": result.container_id,
            "moved_items": result.moved_items,
            "destination_id": result.destination_id,
            "destination_pathname": destination,
        }
        return create_response("删除容器成功", payload)

    # ------------------------------------------------------------------
    # 内部工具
    # ------------------------------------------------------------------

    @staticmethod
    def _reject_root(container_id: int, message: str) -> None:
        if container_id == VIRTUAL_ROOT_ID:
            raise InvalidOperationError(message)

    @staticmethod
    def _get_live(db: Session, *, owner_id: int, container_id: int) -> Container:
        if container_id == VIRTUAL_ROOT_ID:
            return virtual_root(owner_id)
        container = container_crud.get(db, container_id, owner_id=owner_id)
        if container is None:
            raise NotFoundError("容器不存在或已删除", data={"container_id": container_id})
        return container

    @staticmethod
    def _ensure_slot_free(db: Session, *, owner_id: int, name: str, parent_id: Optional[int]) -> None:
        # 已删除的同名容器同样占用槽位
        occupant = container_crud.find_by_path_and_parent(
            db, owner_id=owner_id, path=name, parent_id=parent_id, include_deleted=True
        )
        if occupant is not None:
            raise ConflictError(
                f"目标位置已存在名为 '{name}' 的容器",
                data={"container_id": occupant.id, "is_deleted": bool(occupant.is_deleted)},
            )

    @staticmethod
    def _ensure_depth_fits(db: Session, *, owner_id: int, container: Container, destination: Container) -> None:
        # 移动后子树最深的节点也不能超过层级上限
        max_depth = get_settings().max_tree_depth
        destination_depth = 0
        if not destination.is_virtual_root:
            destination_depth = len(
                container_crud.list_ancestors(db, destination.id, owner_id=owner_id, max_depth=max_depth)
            )
        height = container_crud.subtree_height(db, container.id, owner_id=owner_id, max_depth=max_depth)
        if destination_depth + height > max_depth:
            raise ValidationError(
                f"移动后路径层级将超过 {max_depth} 级",
                data={"container_id": container.id, "depth": destination_depth + height},
            )

    @staticmethod
    def _serialize(db: Session, owner_id: int, container: Container) -> Dict[str, Any]:
        pathname = path_resolver.get_pathname(db, owner_id=owner_id, container_id=container.id)
        return serialize_container(container, pathname)


container_service = ContainerService()
