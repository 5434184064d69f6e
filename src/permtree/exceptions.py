"""Exception hierarchy raised by permtree stores."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for every error a Store raises."""


class PermissionDenied(StoreError):
    """A slot was read or written without the matching capability."""

    def __init__(self, key: str, mode: str, path: str = ""):
        self.key = key
        self.mode = mode
        self.path = path or key
        super().__init__(
            f"{mode} permission is missing to access '{key}' (path '{self.path}')"
        )


class InvalidPath(StoreError):
    """A path could not be traversed."""

    def __init__(self, path: str, segment: str, reason: str):
        self.path = path
        self.segment = segment
        self.reason = reason
        super().__init__(f"invalid path '{path}' at '{segment}': {reason}")


class InvalidPermission(StoreError, ValueError):
    """A permission spelling did not name a known permission."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"unknown permission: {value!r}")
