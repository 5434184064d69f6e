from __future__ import annotations

"""JSON-like value types used at the store boundary.

These aliases intentionally avoid `object`/`Any` so the values a Store
accepts stay auditable: anything written is JSON-shaped, a Store, or a
zero-argument producer of one of those.
"""

from typing import TYPE_CHECKING, Callable, Mapping, TypeAlias, Union

if TYPE_CHECKING:
    from permtree.store import Producer, Store


JSONScalar: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]
JSONArray: TypeAlias = list[JSONValue]

StoreResult: TypeAlias = Union["Store", JSONScalar, JSONArray]
SlotValue: TypeAlias = Union["Store", "Producer", JSONScalar, JSONArray]
StoreValue: TypeAlias = Union[
    StoreResult,
    Mapping[str, "StoreValue"],
    Callable[[], object],
]
