from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from permtree.config import (
    StoreConfig,
    current_store_config,
    load_config,
    store_config_from_env,
    store_config_from_table,
    store_config_scope,
    store_defaults,
)
from permtree.exceptions import InvalidPermission
from permtree.permissions import Permission
from permtree.store import Store
from tests.env_helpers import default_policy_env


def test_store_defaults_reads_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "permtree.toml"
    config_path.write_text(
        textwrap.dedent(
            """
            [store]
            default_policy = "read"
            """
        ).strip()
        + "\n",
        encoding="utf-8",
    )
    assert store_defaults(root=tmp_path) == {"default_policy": "read"}
    assert store_config_from_table(store_defaults(config_path=config_path)) == StoreConfig(
        default_policy=Permission.READ
    )


def test_load_config_tolerates_missing_and_invalid_files(tmp_path: Path) -> None:
    assert load_config(root=tmp_path) == {}
    broken = tmp_path / "broken.toml"
    broken.write_text("[store\n", encoding="utf-8")
    assert load_config(config_path=broken) == {}
    assert store_defaults(config_path=broken) == {}


def test_store_section_must_be_a_table(tmp_path: Path) -> None:
    config_path = tmp_path / "permtree.toml"
    config_path.write_text('store = "r"\n', encoding="utf-8")
    assert store_defaults(config_path=config_path) == {}


def test_store_config_from_table_defaults_and_errors() -> None:
    assert store_config_from_table(None) == StoreConfig()
    assert store_config_from_table({"other": 1}) == StoreConfig()
    with pytest.raises(InvalidPermission):
        store_config_from_table({"default_policy": "sometimes"})


def test_store_config_from_env() -> None:
    base = StoreConfig(default_policy=Permission.WRITE)
    with default_policy_env(None):
        assert store_config_from_env(base) is base
    with default_policy_env(" none "):
        assert store_config_from_env(base).default_policy is Permission.NONE
    with default_policy_env("nope"):
        with pytest.raises(InvalidPermission):
            store_config_from_env()


def test_store_config_normalizes_spelling() -> None:
    assert StoreConfig(default_policy="read-write").default_policy is Permission.READ_WRITE  # type: ignore[arg-type]


def test_scope_sets_default_policy_for_new_stores() -> None:
    assert Store().default_policy is Permission.READ_WRITE
    with store_config_scope(StoreConfig(default_policy=Permission.READ)) as config:
        assert current_store_config() is config
        store = Store()
        assert store.default_policy is Permission.READ
        explicit = Store(default_policy="w")
        assert explicit.default_policy is Permission.WRITE
        nested = explicit.write("nested", {"leaf": 1})
        assert isinstance(nested, Store)
        assert nested.default_policy is Permission.READ
        assert nested.read("leaf") == 1
    assert current_store_config() == StoreConfig()
