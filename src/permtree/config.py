from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Iterator, TypeAlias
import os
import tomllib

from permtree.permissions import Permission, parse_permission

DEFAULT_CONFIG_NAME = "permtree.toml"
DEFAULT_POLICY_ENV = "PERMTREE_DEFAULT_POLICY"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


@dataclass(frozen=True)
class StoreConfig:
    default_policy: Permission = Permission.READ_WRITE

    def __post_init__(self) -> None:
        object.__setattr__(self, "default_policy", parse_permission(self.default_policy))


_STORE_CONFIG: ContextVar[StoreConfig] = ContextVar(
    "permtree_store_config",
    default=StoreConfig(),
)


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def store_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("store", {})
    return section if isinstance(section, dict) else {}


def store_config_from_table(section: TomlTable | None) -> StoreConfig:
    """Build a StoreConfig from a ``[store]`` table.

    Unknown keys are ignored; an unknown ``default_policy`` spelling raises
    InvalidPermission rather than silently falling back.
    """
    if not section:
        return StoreConfig()
    policy = section.get("default_policy")
    if policy is None:
        return StoreConfig()
    return StoreConfig(default_policy=parse_permission(str(policy)))


def store_config_from_env(base: StoreConfig | None = None) -> StoreConfig:
    config = base if base is not None else StoreConfig()
    value = os.getenv(DEFAULT_POLICY_ENV, "").strip()
    if not value:
        return config
    return StoreConfig(default_policy=parse_permission(value))


def current_store_config() -> StoreConfig:
    return _STORE_CONFIG.get()


def set_store_config(config: StoreConfig) -> Token[StoreConfig]:
    return _STORE_CONFIG.set(config)


def reset_store_config(token: Token[StoreConfig]) -> None:
    _STORE_CONFIG.reset(token)


@contextmanager
def store_config_scope(config: StoreConfig) -> Iterator[StoreConfig]:
    token = set_store_config(config)
    try:
        yield config
    finally:
        reset_store_config(token)
