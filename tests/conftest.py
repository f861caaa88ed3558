from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from plistkit import type_cache


@pytest.fixture
def fresh_type_cache():
    saved = dict(type_cache._CACHE)
    type_cache._CACHE.clear()
    yield type_cache._CACHE
    type_cache._CACHE.clear()
    type_cache._CACHE.update(saved)


@pytest.fixture
def write_config(tmp_path: Path):
    def _write(text: str, name: str = "plistkit.toml") -> Path:
        path = tmp_path / name
        path.write_text(text.strip() + "\n", encoding="utf-8")
        return path

    return _write
