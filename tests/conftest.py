from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from permtree.config import StoreConfig, store_config_scope
from permtree.store import Store


@pytest.fixture(autouse=True)
def _store_config_fixture():
    with store_config_scope(StoreConfig()):
        yield


@pytest.fixture
def store() -> Store:
    return Store()


@pytest.fixture
def write_document():
    def _write(path: Path, text: str) -> Path:
        path.write_text(text, encoding="utf-8")
        return path

    return _write
