from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from permtree.exceptions import InvalidPermission


class Permission(str, Enum):
    READ = "r"
    WRITE = "w"
    READ_WRITE = "rw"
    NONE = "none"

    @property
    def can_read(self) -> bool:
        return "r" in self.value

    @property
    def can_write(self) -> bool:
        return "w" in self.value


_ALIASES: dict[str, Permission] = {
    "r": Permission.READ,
    "read": Permission.READ,
    "w": Permission.WRITE,
    "write": Permission.WRITE,
    "rw": Permission.READ_WRITE,
    "wr": Permission.READ_WRITE,
    "read-write": Permission.READ_WRITE,
    "read_write": Permission.READ_WRITE,
    "none": Permission.NONE,
}


def parse_permission(value: Permission | str) -> Permission:
    """Normalize a permission spelling (``"r"``, ``"read-write"``, ...)."""
    if isinstance(value, Permission):
        return value
    if not isinstance(value, str):
        raise InvalidPermission(value)
    permission = _ALIASES.get(value.strip().lower())
    if permission is None:
        raise InvalidPermission(value)
    return permission


def parse_override(value: Permission | str | None) -> Permission | None:
    """Like parse_permission, but an empty spelling means "no override"."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return parse_permission(value)


def normalize_overrides(
    overrides: Mapping[str, Permission | str | None],
) -> Mapping[str, Permission]:
    normalized: dict[str, Permission] = {}
    for name, raw in overrides.items():
        permission = parse_override(raw)
        if permission is not None:
            normalized[str(name)] = permission
    return MappingProxyType(normalized)
