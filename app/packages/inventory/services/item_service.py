"""物品服务：物品的增删改查、批量迁移与孤儿物品处理。"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.packages.inventory.core.exceptions import NotFoundError, ValidationError
from app.packages.inventory.core.logger import logger
from app.packages.inventory.core.responses import create_response
from app.packages.inventory.crud.items import item_crud
from app.packages.inventory.db.session import atomic
from app.packages.inventory.models import Container, Item
from app.packages.inventory.services.item_relocator import item_relocator
from app.packages.inventory.services.path_resolver import path_resolver
from app.packages.inventory.services.serializers import serialize_item
from app.packages.inventory.services.tag_service import tag_service
from app.packages.inventory.utils.path_utils import ContainerPath


class ItemService:
    """封装物品相关的业务逻辑。"""

    def create(
        self,
        db: Session,
        *,
        owner_id: int,
        name: str,
        pathname: Optional[str],
        description: Optional[str] = None,
        count: int = 1,
        is_public: bool = False,
        tags: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """在 ``pathname`` 下创建物品；容器路径与物品在同一事务中写入。"""
        with atomic(db):
            container = self._ensure_container(db, owner_id=owner_id, pathname=pathname)
            item = item_crud.create_item(
                db,
                owner_id=owner_id,
                container_id=container.id,
                name=name,
                description=description,
                count=count,
                is_public=is_public,
            )
            if tags:
                tag_service.replace_tags(db, owner_id=owner_id, target=item, names=tags)
        logger.info("items.create owner=%s id=%s container=%s", owner_id, item.id, item.container_id)
        return create_response("创建物品成功", self._serialize(db, owner_id, item))

    def get(self, db: Session, *, owner_id: int, item_id: int) -> Dict[str, Any]:
        item = self._get_live(db, owner_id=owner_id, item_id=item_id)
        return create_response("获取物品成功", self._serialize(db, owner_id, item))

    def list(self, db: Session, *, owner_id: int, container_id: Optional[int] = None) -> Dict[str, Any]:
        items = item_crud.get_all(db, owner_id=owner_id, container_id=container_id)
        return create_response("获取物品列表成功", self._serialize_many(db, owner_id, items))

    def update(
        self,
        db: Session,
        *,
        owner_id: int,
        item_id: int,
        name: Optional[str] = None,
        pathname: Optional[str] = None,
        description: Optional[str] = None,
        count: Optional[int] = None,
        is_public: Optional[bool] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """局部更新；给出 ``pathname`` 时物品被改挂到该路径（按需创建）。"""
        with atomic(db):
            self._get_live(db, owner_id=owner_id, item_id=item_id)
            container_id = None
            if pathname is not None:
                container_id = self._ensure_container(db, owner_id=owner_id, pathname=pathname).id
            item = item_crud.update_item(
                db,
                item_id,
                owner_id=owner_id,
                changes={
                    "name": name,
                    "description": description,
                    "count": count,
                    "is_public": is_public,
                    "container_id": container_id,
                },
            )
            if tags is not None:
                tag_service.replace_tags(db, owner_id=owner_id, target=item, names=tags)
        logger.info("items.update owner=%s id=%s", owner_id, item_id)
        return create_response("更新物品成功", self._serialize(db, owner_id, item))

    def delete(self, db: Session, *, owner_id: int, item_id: int) -> Dict[str, Any]:
        with atomic(db):
            if not item_crud.soft_delete_by_id(db, item_id, owner_id=owner_id):
                raise NotFoundError("物品不存在或已删除", data={"item_id": item_id})
        logger.info("items.delete owner=%s id=%s", owner_id, item_id)
        return create_response("删除物品成功", {"item_id": item_id})

    def move_items(self, db: Session, *, owner_id: int, source_id: int, pathname: str) -> Dict[str, Any]:
        """把某容器下的全部物品移动到 ``pathname``。"""
        moved = item_relocator.move_items_to_pathname(
            db, owner_id=owner_id, source_id=source_id, pathname=pathname
        )
        return create_response("移动物品成功", {"moved": moved})

    def orphaned(self, db: Session, *, owner_id: int) -> Dict[str, Any]:
        orphans = item_relocator.find_orphaned_items(db, owner_id=owner_id)
        data = [{"id": orphan.id, "name": orphan.name} for orphan in orphans]
        return create_response("获取孤儿物品成功", data)

    def move_orphaned(self, db: Session, *, owner_id: int, item_ids: Iterable[int], pathname: str) -> Dict[str, Any]:
        moved = item_relocator.move_orphaned_items(db, owner_id=owner_id, item_ids=item_ids, pathname=pathname)
        return create_response("移动孤儿物品成功", {"moved": moved})

    # ------------------------------------------------------------------
    # 内部工具
    # ------------------------------------------------------------------

    @staticmethod
    def _ensure_container(db: Session, *, owner_id: int, pathname: Optional[str]) -> Container:
        target = ContainerPath.parse(pathname)
        if target.is_root:
            raise ValidationError("物品不能直接放在根目录下，请指定具体容器")
        return path_resolver.ensure_pathname(db, owner_id=owner_id, path=target)

    @staticmethod
    def _get_live(db: Session, *, owner_id: int, item_id: int) -> Item:
        item = item_crud.get(db, item_id, owner_id=owner_id)
        if item is None:
            raise NotFoundError("物品不存在或已删除", data={"item_id": item_id})
        return item

    @staticmethod
    def _serialize(db: Session, owner_id: int, item: Item) -> Dict[str, Any]:
        pathname = path_resolver.get_pathname(db, owner_id=owner_id, container_id=item.container_id)
        return serialize_item(item, pathname)

    @staticmethod
    def _serialize_many(db: Session, owner_id: int, items: List[Item]) -> List[Dict[str, Any]]:
        # 同一容器的路径只计算一次
        pathnames: Dict[int, Optional[str]] = {}
        result = []
        for item in items:
            if item.container_id not in pathnames:
                pathnames[item.container_id] = path_resolver.get_pathname(
                    db, owner_id=owner_id, container_id=item.container_id
                )
            result.append(serialize_item(item, pathnames[item.container_id]))
        return result


item_service = ItemService()
