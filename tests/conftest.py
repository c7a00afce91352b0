from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from bundle_splitter.units import ModuleDescriptor  # noqa: E402


@pytest.fixture
def descriptors() -> Callable[..., List[ModuleDescriptor]]:
    """Build descriptors ``moduleA``, ``moduleB``... labelled ``./src/<id>``."""
    return lambda *ids: [ModuleDescriptor(i, f"./src/{i}") for i in ids]


_ROWS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "file": "./src/main.js",
        "source": "var a = require('./a');\na();",
        "deps": {"./a": 2},
        "entry": True,
    },
    {"id": 2, "file": "./src/a.js", "source": "module.exports = 'a';", "deps": {}},
    {"id": 3, "file": "./src/b.js", "source": "exports.b = 'b';", "deps": {}},
]


@pytest.fixture
def module_rows() -> List[Dict[str, Any]]:
    return [dict(r) for r in _ROWS]


@pytest.fixture
def rows_file(tmp_path: Path, module_rows: List[Dict[str, Any]]) -> Path:
    path = tmp_path / "modules.jsonl"
    path.write_text("\n".join(json.dumps(r) for r in module_rows) + "\n", encoding="utf-8")
    return path
