"""目录树构建测试。"""

import pytest
from sqlalchemy.orm import Session

from app.packages.inventory.core.config import get_settings
from app.packages.inventory.core.exceptions import NotFoundError, TreeIntegrityError
from app.packages.inventory.crud.containers import container_crud
from app.packages.inventory.crud.items import item_crud
from app.packages.inventory.services.directory_tree import directory_tree_builder
from app.packages.inventory.services.path_resolver import path_resolver


def _shape(node):
    return {
        "path": node.container.path,
        "items": [item.name for item in node.items],
        "children": [_shape(child) for child in node.children],
    }


def test_build_tree_from_root(db: Session, owner_id: int):
    bin_a = path_resolver.ensure_pathname(db, owner_id=owner_id, path="/garage/shelf_1/bin_a")
    path_resolver.ensure_pathname(db, owner_id=owner_id, path="/kitchen")
    item_crud.create_item(db, owner_id=owner_id, container_id=bin_a.id, name="hammer")
    item_crud.create_item(db, owner_id=owner_id, container_id=bin_a.id, name="drill", count=2)

    tree = directory_tree_builder.build_tree_for(db, owner_id=owner_id, container_id=0)

    assert _shape(tree) == {
        "path": "/",
        "items": [],
        "children": [
            {
                "path": "garage",
                "items": [],
                "children": [
                    {
                        "path": "shelf_1",
                        "items": [],
                        "children": [{"path": "bin_a", "items": ["drill", "hammer"], "children": []}],
                    }
                ],
            },
            {"path": "kitchen", "items": [], "children": []},
        ],
    }
    assert [node.container.path for node in tree.walk()] == ["/", "garage", "shelf_1", "bin_a", "kitchen"]


def test_build_tree_excludes_deleted_rows(db: Session, owner_id: int):
    shelf = path_resolver.ensure_pathname(db, owner_id=owner_id, path="/garage/shelf_1")
    old = path_resolver.ensure_pathname(db, owner_id=owner_id, path="/garage/old")
    kept = item_crud.create_item(db, owner_id=owner_id, container_id=shelf.id, name="kept")
    gone = item_crud.create_item(db, owner_id=owner_id, container_id=shelf.id, name="gone")
    item_crud.soft_delete_by_id(db, gone.id, owner_id=owner_id)
    container_crud.soft_delete_by_id(db, old.id, owner_id=owner_id)

    tree = directory_tree_builder.build_tree_for(db, owner_id=owner_id, container_id=shelf.parent_id)

    assert tree.container.path == "garage"
    assert [child.container.path for child in tree.children] == ["shelf_1"]
    assert [item.id for item in tree.children[0].items] == [kept.id]


def test_build_tree_for_unknown_container(db: Session, owner_id: int):
    with pytest.raises(NotFoundError):
        directory_tree_builder.build_tree_for(db, owner_id=owner_id, container_id=987654321)


def test_build_tree_detects_cycle(db: Session, owner_id: int):
    b = path_resolver.ensure_pathname(db, owner_id=owner_id, path="/a/b")
    a = container_crud.get(db, b.parent_id, owner_id=owner_id)
    a.parent_id = b.id
    db.flush()

    with pytest.raises(TreeIntegrityError):
        directory_tree_builder.build_tree_for(db, owner_id=owner_id, container_id=a.id)


def test_build_tree_depth_cap(db: Session, owner_id: int, monkeypatch):
    path_resolver.ensure_pathname(db, owner_id=owner_id, path="/l1/l2/l3/l4")
    monkeypatch.setattr(get_settings(), "max_tree_depth", 3)

    with pytest.raises(TreeIntegrityError):
        directory_tree_builder.build_tree_for(db, owner_id=owner_id, container_id=0)
