"""容器存储层测试：槽位唯一、复用已删除行、并发冲突重试。"""

import pytest
from sqlalchemy.orm import Session

from app.packages.inventory.core.exceptions import ConflictError, TreeIntegrityError
from app.packages.inventory.crud.containers import CRUDContainer, container_crud
from app.packages.inventory.db import session as db_session
from app.packages.inventory.models import Container


def _count_slot(db: Session, owner_id: int, path: str) -> int:
    return (
        db.query(Container)
        .filter(Container.owner_id == owner_id, Container.path == path)
        .count()
    )


def test_get_or_create_returns_existing_row(db: Session, owner_id: int):
    first = container_crud.get_or_create(db, owner_id=owner_id, path="garage", parent_id=0)
    second = container_crud.get_or_create(db, owner_id=owner_id, path="garage", parent_id=None)

    assert first.id == second.id
    assert first.parent_id is None
    assert _count_slot(db, owner_id, "garage") == 1


def test_get_or_create_undeletes_soft_deleted_row(db: Session, owner_id: int):
    garage = container_crud.create_node(db, owner_id=owner_id, path="garage", parent_id=0)
    assert container_crud.soft_delete_by_id(db, garage.id, owner_id=owner_id) is True
    assert container_crud.find_by_path_and_parent(db, owner_id=owner_id, path="garage", parent_id=0) is None

    revived = container_crud.get_or_create(db, owner_id=owner_id, path="garage", parent_id=0)

    assert revived.id == garage.id
    assert revived.is_deleted is False
    assert _count_slot(db, owner_id, "garage") == 1


def test_create_node_conflict_keeps_outer_transaction_usable(db: Session, owner_id: int):
    garage = container_crud.create_node(db, owner_id=owner_id, path="garage", parent_id=0)
    container_crud.create_node(db, owner_id=owner_id, path="shelf", parent_id=garage.id)

    with pytest.raises(ConflictError):
        container_crud.create_node(db, owner_id=owner_id, path="shelf", parent_id=garage.id)
    with pytest.raises(ConflictError):
        container_crud.create_node(db, owner_id=owner_id, path="garage", parent_id=0)

    children = container_crud.get_children(db, owner_id=owner_id, parent_id=garage.id)
    assert [child.path for child in children] == ["shelf"]


def test_get_or_create_recovers_from_concurrent_insert(db: Session, owner_id: int, monkeypatch):
    # 另一个会话抢先提交了同一槽位
    other = db_session.SessionLocal()
    try:
        winner = container_crud.create_node(other, owner_id=owner_id, path="attic", parent_id=0)
        other.commit()
        winner_id = winner.id
    finally:
        other.close()

    original = CRUDContainer.find_by_path_and_parent
    calls = {"count": 0}

    def stale_first_read(self, db, **kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return original(self, db, **kwargs)

    monkeypatch.setattr(CRUDContainer, "find_by_path_and_parent", stale_first_read)

    container = container_crud.get_or_create(db, owner_id=owner_id, path="attic", parent_id=0)

    assert container.id == winner_id
    assert calls["count"] == 2
    assert _count_slot(db, owner_id, "attic") == 1


def test_same_name_under_different_parents(db: Session, owner_id: int):
    a = container_crud.create_node(db, owner_id=owner_id, path="a", parent_id=0)
    b = container_crud.create_node(db, owner_id=owner_id, path="b", parent_id=0)

    box_a = container_crud.get_or_create(db, owner_id=owner_id, path="box", parent_id=a.id)
    box_b = container_crud.get_or_create(db, owner_id=owner_id, path="box", parent_id=b.id)

    assert box_a.id != box_b.id


def test_owners_do_not_share_slots(db: Session, owner_id: int, other_owner_id: int):
    mine = container_crud.get_or_create(db, owner_id=owner_id, path="garage", parent_id=0)
    theirs = container_crud.get_or_create(db, owner_id=other_owner_id, path="garage", parent_id=0)

    assert mine.id != theirs.id
    assert container_crud.get(db, mine.id, owner_id=other_owner_id) is None


def test_search_by_parent_and_prefix(db: Session, owner_id: int):
    garage = container_crud.create_node(db, owner_id=owner_id, path="garage", parent_id=0)
    for name in ("Shelf_1", "shelf_2", "bin", "50%_off"):
        container_crud.create_node(db, owner_id=owner_id, path=name, parent_id=garage.id)

    shelves = container_crud.search_by_parent_and_prefix(db, owner_id=owner_id, parent_id=garage.id, prefix="SHELF")
    assert sorted(c.path for c in shelves) == ["Shelf_1", "shelf_2"]

    literal = container_crud.search_by_parent_and_prefix(db, owner_id=owner_id, parent_id=garage.id, prefix="%")
    assert [c.path for c in literal] == ["50%_off"]

    everything = container_crud.search_by_parent_and_prefix(db, owner_id=owner_id, parent_id=garage.id, prefix=None)
    assert len(everything) == 4

    limited = container_crud.search_by_parent_and_prefix(
        db, owner_id=owner_id, parent_id=garage.id, prefix=None, limit=2
    )
    assert len(limited) == 2


def test_search_excludes_deleted(db: Session, owner_id: int):
    box = container_crud.create_node(db, owner_id=owner_id, path="box", parent_id=0)
    container_crud.soft_delete_by_id(db, box.id, owner_id=owner_id)

    assert container_crud.search_by_parent_and_prefix(db, owner_id=owner_id, parent_id=0, prefix="box") == []


def test_update_node_conflict(db: Session, owner_id: int):
    container_crud.create_node(db, owner_id=owner_id, path="a", parent_id=0)
    b = container_crud.create_node(db, owner_id=owner_id, path="b", parent_id=0)

    with pytest.raises(ConflictError):
        container_crud.update_node(db, b.id, owner_id=owner_id, path="a")

    assert container_crud.get(db, b.id, owner_id=owner_id).path == "b"


def test_list_ancestors_walks_to_root(db: Session, owner_id: int):
    a = container_crud.create_node(db, owner_id=owner_id, path="a", parent_id=0)
    b = container_crud.create_node(db, owner_id=owner_id, path="b", parent_id=a.id)
    c = container_crud.create_node(db, owner_id=owner_id, path="c", parent_id=b.id)

    chain = container_crud.list_ancestors(db, c.id, owner_id=owner_id, max_depth=64)

    assert [node.path for node in chain] == ["c", "b", "a"]
    assert container_crud.list_ancestors(db, 987654321, owner_id=owner_id, max_depth=64) == []


def test_list_ancestors_detects_cycle(db: Session, owner_id: int):
    a = container_crud.create_node(db, owner_id=owner_id, path="a", parent_id=0)
    b = container_crud.create_node(db, owner_id=owner_id, path="b", parent_id=a.id)
    a.parent_id = b.id
    db.flush()

    with pytest.raises(TreeIntegrityError):
        container_crud.list_ancestors(db, b.id, owner_id=owner_id, max_depth=64)


def test_subtree_height_counts_deleted_descendants(db: Session, owner_id: int):
    a = container_crud.create_node(db, owner_id=owner_id, path="a", parent_id=0)
    b = container_crud.create_node(db, owner_id=owner_id, path="b", parent_id=a.id)
    container_crud.create_node(db, owner_id=owner_id, path="b2", parent_id=a.id)
    c = container_crud.create_node(db, owner_id=owner_id, path="c", parent_id=b.id)
    container_crud.soft_delete(db, c)

    assert container_crud.subtree_height(db, a.id, owner_id=owner_id, max_depth=64) == 3
    assert container_crud.subtree_height(db, c.id, owner_id=owner_id, max_depth=64) == 1
    with pytest.raises(TreeIntegrityError):
        container_crud.subtree_height(db, a.id, owner_id=owner_id, max_depth=2)
