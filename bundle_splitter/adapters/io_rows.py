"""Input adapter for module records and pre-packed chunk streams.

Two input shapes are accepted:

* module records, as ``.jsonl`` (one record per line) or a ``.json`` list;
  each record carries ``id`` and optionally ``file``, ``source``, ``deps``
  and ``entry``. These are packed by the reference packer.
* a pack stream document, a ``.json`` object ``{"modules": [...],
  "chunks": [...]}`` written by an external bundler, where ``chunks`` are
  the packed chunks as strings and ``modules`` their records in order.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any


def _json_lines(path: Path) -> Iterator[dict[str, Any]]:
    """Yield one record per non-blank line of ``path``."""
    with path.open(encoding="utf-8") as f:
        yield from (json.loads(line) for line in f if line.strip())


def _load(path: Path) -> Any:
    if path.suffix.lower() == ".jsonl":
        return list(_json_lines(path))
    return json.loads(path.read_text(encoding="utf-8"))


def _check_rows(rows: Any) -> list[dict[str, Any]]:
    if not isinstance(rows, list):
        raise TypeError("module records must be a JSON list")
    missing = [i for i, r in enumerate(rows) if not isinstance(r, dict) or "id" not in r]
    if missing:
        raise ValueError(f"module records without an id at positions {missing}")
    return rows


def read_input(path: str | Path) -> dict[str, Any]:
    """Return the initial payload for ``path``.

    Module records become ``{"type": "module_rows", "rows": [...]}``; a pack
    stream document additionally carries its ``chunks`` as bytes.
    """
    p = Path(path)
    data = _load(p)
    if isinstance(data, dict):
        if "chunks" not in data:
            raise TypeError(f"{p} must be a list of module records or a pack stream")
        chunks = data["chunks"]
        if not isinstance(chunks, list):
            raise TypeError("pack stream chunks must be a JSON list")
        return {
            "type": "module_rows",
            "source_path": str(p),
            "rows": _check_rows(data.get("modules", [])),
            "chunks": [str(c).encode("utf-8") for c in chunks],
        }
    return {"type": "module_rows", "source_path": str(p), "rows": _check_rows(data)}


__all__ = ["read_input"]
