from __future__ import annotations

from permtree.exceptions import InvalidPath

PATH_SEPARATOR = ":"


def split_path(path: str) -> list[str]:
    if not isinstance(path, str):
        raise InvalidPath(str(path), "", "path must be a string")
    segments = path.split(PATH_SEPARATOR)
    for segment in segments:
        if not segment:
            raise InvalidPath(path, segment, "empty path segment")
    return segments

