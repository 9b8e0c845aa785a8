"""物品迁移服务：在容器之间批量移动物品，删除容器时先清空再软删除。

每个公开方法都是一个完整事务（``atomic``）：目标路径的创建、物品改挂与
容器软删除要么一起生效，要么一起回滚，不会留下"物品已移走但容器未删除"
之类的中间状态。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.packages.inventory.core.constants import VIRTUAL_ROOT_ID
from app.packages.inventory.core.exceptions import (
    InvalidOperationError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from app.packages.inventory.core.logger import logger
from app.packages.inventory.crud.containers import container_crud
from app.packages.inventory.crud.items import item_crud
from app.packages.inventory.db.session import atomic
from app.packages.inventory.models import Container
from app.packages.inventory.services.path_resolver import path_resolver
from app.packages.inventory.utils.path_utils import ContainerPath


@dataclass(frozen=True)
class DeleteContainerResult:
    container_id: int
    moved_items: int = 0
    destination_id: Optional[int] = None


@dataclass(frozen=True)
class OrphanedItem:
    id: int
    name: str


class ItemRelocator:
    def move_items_to_container(
        self, db: Session, *, owner_id: int, source_id: int, destination_id: int
    ) -> bool:
        """把 ``source_id`` 下的全部未删除物品移到已存在的 ``destination_id``。

        没有可移动的物品时返回 False。
        """
        with atomic(db):
            self._require_destination(db, owner_id=owner_id, destination_id=destination_id)
            moved = self._move_all(db, owner_id=owner_id, source_id=source_id, destination_id=destination_id)
        return moved > 0

    def move_items_to_pathname(self, db: Session, *, owner_id: int, source_id: int, pathname: str) -> bool:
        """同上，但目标由路径给出，缺失的容器会先被补齐。"""
        with atomic(db):
            destination = self._ensure_destination(db, owner_id=owner_id, pathname=pathname)
            moved = self._move_all(db, owner_id=owner_id, source_id=source_id, destination_id=destination.id)
        return moved > 0

    def delete_container(
        self,
        db: Session,
        *,
        owner_id: int,
        container_id: int,
        destination_pathname: Optional[str] = None,
    ) -> DeleteContainerResult:
        """软删除容器；容器非空时必须给出目标路径，物品先迁移再删除。

        子容器不受影响：它们保留 ``parent_id``，在父容器被重新创建（取消删除）
        后重新出现在树中。
        """
        if container_id == VIRTUAL_ROOT_ID:
            raise InvalidOperationError("根容器不可删除")

        with atomic(db):
            container = container_crud.get(db, container_id, owner_id=owner_id)
            if container is None:
                raise NotFoundError("容器不存在或已删除", data={"container_id": container_id})

            moved = 0
            destination_id: Optional[int] = None
            item_count = item_crud.count(db, owner_id=owner_id, container_id=container_id)
            if item_count > 0:
                if not (destination_pathname or "").strip():
                    raise PreconditionError(
                        "容器中仍有物品，请指定物品的目标容器",
                        data={"container_id": container_id, "item_count": item_count},
                    )
                destination = self._ensure_destination(db, owner_id=owner_id, pathname=destination_pathname)
                if path_resolver.is_same_or_descendant(
                    db, owner_id=owner_id, container_id=destination.id, ancestor_id=container_id
                ):
                    raise InvalidOperationError(
                        "目标容器不能是待删除的容器本身或其子容器",
                        data={"container_id": container_id, "destination": destination_pathname},
                    )
                destination_id = destination.id
                moved = self._move_all(db, owner_id=owner_id, source_id=container_id, destination_id=destination_id)

            container_crud.soft_delete(db, container)

        logger.info(
            "containers.delete owner=%s id=%s moved_items=%s destination=%s",
            owner_id,
            container_id,
            moved,
            destination_id,
        )
        return DeleteContainerResult(container_id=container_id, moved_items=moved, destination_id=destination_id)

    def delete_container_at(
        self,
        db: Session,
        *,
        owner_id: int,
        pathname: str,
        destination_pathname: Optional[str] = None,
    ) -> DeleteContainerResult:
        """按路径删除容器，语义与 ``delete_container`` 相同。"""
        target = ContainerPath.parse(pathname)
        if target.is_root:
            raise InvalidOperationError("根容器不可删除")
        container = path_resolver.resolve_existing(db, owner_id=owner_id, path=target)
        if container is None:
            raise NotFoundError("容器不存在或已删除", data={"pathname": str(target)})
        return self.delete_container(
            db, owner_id=owner_id, container_id=container.id, destination_pathname=destination_pathname
        )

    def find_orphaned_items(self, db: Session, *, owner_id: int) -> List[OrphanedItem]:
        return [OrphanedItem(id=item.id, name=item.name) for item in item_crud.list_orphaned(db, owner_id=owner_id)]

    def move_orphaned_items(self, db: Session, *, owner_id: int, item_ids: Iterable[int], pathname: str) -> bool:
        """把指定物品直接改挂到 ``pathname``（按需创建）；列表为空时返回 False。"""
        ids = list(dict.fromkeys(int(item_id) for item_id in item_ids or ()))
        if not ids:
            return False

        with atomic(db):
            destination = self._ensure_destination(db, owner_id=owner_id, pathname=pathname)
            for item_id in ids:
                updated = item_crud.update_item(
                    db, item_id, owner_id=owner_id, changes={"container_id": destination.id}
                )
                if updated is None:
                    raise NotFoundError("物品不存在或已删除", data={"item_id": item_id})

        logger.info("items.move_orphaned owner=%s ids=%s destination=%s", owner_id, ids, destination.id)
        return True

    @staticmethod
    def _require_destination(db: Session, *, owner_id: int, destination_id: int) -> Container:
        if destination_id == VIRTUAL_ROOT_ID:
            raise ValidationError("物品不能直接放在根目录下，请指定具体容器")
        destination = container_crud.get(db, destination_id, owner_id=owner_id)
        if destination is None:
            raise NotFoundError("目标容器不存在或已删除", data={"container_id": destination_id})
        return destination

    @staticmethod
    def _ensure_destination(db: Session, *, owner_id: int, pathname: Optional[str]) -> Container:
        target = ContainerPath.parse(pathname)
        if target.is_root:
            raise ValidationError("物品不能直接放在根目录下，请指定具体容器")
        return path_resolver.ensure_pathname(db, owner_id=owner_id, path=target)

    @staticmethod
    def _move_all(db: Session, *, owner_id: int, source_id: int, destination_id: int) -> int:
        if source_id == destination_id:
            return 0
        items = item_crud.get_all(db, owner_id=owner_id, container_id=source_id)
        if not items:
            return 0
        moved = item_crud.reassign(
            db, [item.id for item in items], owner_id=owner_id, container_id=destination_id
        )
        logger.info(
            "items.move owner=%s source=%s destination=%s count=%s", owner_id, source_id, destination_id, moved
        )
        return moved


item_relocator = ItemRelocator()
