"""Permission-checked hierarchical key-value store.

A Store maps slot names to values. A value is a JSON scalar, an opaque JSON
array, a nested Store, or a Producer that is called on every read. Each slot
is governed by the permission declared for its name on the Store's class, or
by the instance's ``default_policy`` when the class declares none.

Slot permissions are declared with the class::

    class Account(Store, permissions={"secret": "none", "id": "r"}):
        pass

Paths are colon-separated slot names (``"user:address:city"``).
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
import logging
import types
from typing import Callable, ClassVar, Iterator, Mapping, Protocol, runtime_checkable

from permtree.config import current_store_config
from permtree.exceptions import InvalidPath, PermissionDenied
from permtree.json_types import SlotValue, StoreResult, StoreValue
from permtree.paths import PATH_SEPARATOR, split_path
from permtree.permissions import Permission, normalize_overrides, parse_permission

logger = logging.getLogger(__name__)

READ_MODE = "read"
WRITE_MODE = "write"


@dataclass(frozen=True)
class Producer:
    """Deferred slot value. Not memoized: each read calls ``fn`` again."""

    fn: Callable[[], object]

    def __call__(self) -> object:
        return self.fn()


@runtime_checkable
class StoreProtocol(Protocol):
    @property
    def default_policy(self) -> Permission: ...

    def allowed_to_read(self, key: str) -> bool: ...

    def allowed_to_write(self, key: str) -> bool: ...

    def read(self, path: str) -> object: ...

    def write(self, path: str, value: StoreValue) -> object: ...

    def write_entries(self, entries: Mapping[str, StoreValue]) -> None: ...

    def entries(self) -> dict[str, object]: ...


def _unwrap(value: SlotValue) -> object:
    if isinstance(value, Producer):
        return value.fn
    return value


def _check_slot_name(name: str) -> str:
    if not isinstance(name, str) or not name:
        raise InvalidPath(str(name), str(name), "slot names must be non-empty strings")
    if PATH_SEPARATOR in name:
        raise InvalidPath(name, name, f"slot names cannot contain '{PATH_SEPARATOR}'")
    return name


class Store:
    _slot_permissions: ClassVar[Mapping[str, Permission]] = MappingProxyType({})

    def __init_subclass__(
        cls,
        *,
        permissions: Mapping[str, Permission | str | None] | None = None,
        **kwargs: object,
    ) -> None:
        super().__init_subclass__(**kwargs)
        merged: dict[str, Permission] = {}
        for base in reversed(cls.__mro__[1:]):
            merged.update(base.__dict__.get("_slot_permissions", {}))
        if permissions:
            merged.update(normalize_overrides(permissions))
        cls._slot_permissions = MappingProxyType(merged)

    def __init__(
        self,
        values: Mapping[str, StoreValue] | None = None,
        *,
        default_policy: Permission | str | None = None,
    ) -> None:
        self._slots: dict[str, SlotValue] = {}
        if default_policy is None:
            self._default_policy = current_store_config().default_policy
        else:
            self._default_policy = parse_permission(default_policy)
        # Seeded values are declaration-time contents and skip permission checks.
        for name, value in (values or {}).items():
            self._slots[_check_slot_name(name)] = self._coerce(value)

    @property
    def default_policy(self) -> Permission:
        return self._default_policy

    @default_policy.setter
    def default_policy(self, value: Permission | str) -> None:
        self._default_policy = parse_permission(value)

    @classmethod
    def declared_permissions(cls) -> Mapping[str, Permission]:
        return cls._slot_permissions

    def permission_for(self, key: str) -> Permission:
        override = type(self)._slot_permissions.get(key)
        if override is not None:
            return override
        return self._default_policy

    def allowed_to_read(self, key: str) -> bool:
        return self.permission_for(key).can_read

    def allowed_to_write(self, key: str) -> bool:
        return self.permission_for(key).can_write

    def read(self, path: str) -> StoreResult | Callable[[], object]:
        """Resolve ``path`` one segment at a time.

        Readability is checked on every Store passed through. Producers are
        called once per read; a producer returning another callable is not
        chained. A missing (or null) slot ends the lookup with ``None``;
        remaining segments after any other non-Store value raise InvalidPath.
        """
        segments = split_path(path)
        current: object = self
        for segment in segments:
            if current is None:
                return None
            if not isinstance(current, Store):
                raise InvalidPath(
                    path,
                    segment,
                    f"cannot descend into a {type(current).__name__} value",
                )
            if not current.allowed_to_read(segment):
                logger.debug("read denied for %r (path %r)", segment, path)
                raise PermissionDenied(segment, READ_MODE, path)
            value = current._slots.get(segment)
            if isinstance(value, Producer):
                value = value()
            current = value
        return current  # type: ignore[return-value]

    def write(self, path: str, value: StoreValue) -> object:
        """Store ``value`` at ``path`` and return what was stored.

        Mappings become fresh Stores; callables become producers. Missing
        intermediate Stores are created, but only attached once every
        permission check has passed, so a denied write leaves the tree as it
        was.
        """
        stored = self._coerce(value)
        segments = split_path(path)
        parents, last = segments[:-1], segments[-1]
        current = self
        pending: list[tuple[Store, str, Store]] = []
        for index, segment in enumerate(parents):
            if index == len(parents) - 1 and not current.allowed_to_write(segment):
                logger.debug("write denied for %r (path %r)", segment, path)
                raise PermissionDenied(segment, WRITE_MODE, path)
            existing = current._slots.get(segment)
            if existing is None:
                child = Store()
                pending.append((current, segment, child))
                existing = child
            elif not isinstance(existing, Store):
                raise InvalidPath(
                    path,
                    segment,
                    f"cannot descend into a {type(existing).__name__} value",
                )
            current = existing
        if not current.allowed_to_write(last):
            logger.debug("write denied for %r (path %r)", last, path)
            raise PermissionDenied(last, WRITE_MODE, path)
        for parent, segment, child in pending:
            logger.debug("creating intermediate store %r for path %r", segment, path)
            parent._slots[segment] = child
        current._slots[last] = stored
        return _unwrap(stored)

    def write_entries(self, entries: Mapping[str, StoreValue]) -> None:
        # Not transactional: a failure leaves earlier pairs written.
        for key, value in entries.items():
            self.write(key, value)

    def entries(self) -> dict[str, object]:
        return {
            name: _unwrap(value)
            for name, value in self._slots.items()
            if self.allowed_to_read(name)
        }

    def _coerce(self, value: StoreValue) -> SlotValue:
        if isinstance(value, (Store, Producer)):
            return value
        if isinstance(value, Mapping):
            return _materialize(value)
        if callable(value):
            return Producer(value)
        return value  # type: ignore[return-value]

    def __contains__(self, key: object) -> bool:
        return key in self._slots

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._slots))

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        names = ", ".join(self._slots)
        return f"{type(self).__name__}(policy={self._default_policy.value!r}, slots=[{names}])"


def _materialize(mapping: Mapping[str, StoreValue]) -> Store:
    # Mapping keys are slot names, like seeded values; they never nest.
    return Store(mapping)


def restrict(
    permissions: Mapping[str, Permission | str | None],
    *,
    base: type[Store] = Store,
    name: str = "RestrictedStore",
) -> type[Store]:
    """Build a ``base`` subclass declaring ``permissions`` for its slots."""
    return types.new_class(name, (base,), {"permissions": permissions})
