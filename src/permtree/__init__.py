"""permtree package root."""

from permtree.exceptions import InvalidPath, InvalidPermission, PermissionDenied, StoreError
from permtree.permissions import Permission, parse_permission
from permtree.store import Producer, Store, StoreProtocol, restrict

__all__ = [
    "__version__",
    "InvalidPath",
    "InvalidPermission",
    "Permission",
    "PermissionDenied",
    "Producer",
    "Store",
    "StoreError",
    "StoreProtocol",
    "parse_permission",
    "restrict",
]

__version__ = "0.1.0"
