from __future__ import annotations

from permtree.permissions import Permission
from permtree.store import Store, StoreProtocol


class Profile(Store, permissions={"password": "none", "email": "w", "id": "r"}):
    pass


def test_entries_filters_unreadable_slots() -> None:
    profile = Profile({"password": "x", "email": "a@b.c", "id": 1})
    profile.write("name", "Ann")
    assert profile.entries() == {"id": 1, "name": "Ann"}


def test_entries_is_shallow_and_returns_raw_values(store: Store) -> None:
    calls: list[int] = []

    def producer() -> int:
        calls.append(1)
        return 1

    store.write("lazy", producer)
    store.write("nested:leaf", 2)
    snapshot = store.entries()
    assert snapshot["lazy"] is producer
    assert calls == []
    assert isinstance(snapshot["nested"], Store)
    assert set(snapshot) == {"lazy", "nested"}


def test_entries_follows_default_policy(store: Store) -> None:
    store.write_entries({"a": 1, "b": 2})
    store.default_policy = Permission.WRITE
    assert store.entries() == {}
    store.default_policy = Permission.READ
    assert store.entries() == {"a": 1, "b": 2}


def test_entries_is_a_copy(store: Store) -> None:
    store.write("a", 1)
    snapshot = store.entries()
    snapshot["b"] = 2
    assert "b" not in store


def test_introspection_helpers(store: Store) -> None:
    store.write_entries({"a": 1, "b": 2})
    assert len(store) == 2
    assert list(store) == ["a", "b"]
    assert "a" in store
    assert "a" in repr(store) and "rw" in repr(store)


def test_store_satisfies_store_protocol() -> None:
    store: StoreProtocol = Store()
    assert isinstance(store, StoreProtocol)
    assert not isinstance({"a": 1}, StoreProtocol)
