"""Reference packer producing a browser-pack compatible chunk stream.

Real builds get their chunk stream from the host bundler; this packer emits
the same layout from plain module records so the splitter can run end to end.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

RUNTIME_PRELUDE = (
    "(function(){function r(e,n,t){function o(i,f){if(!n[i]){if(!e[i]){"
    'var c="function"==typeof require&&require;if(!f&&c)return c(i,!0);'
    'if(u)return u(i,!0);var a=new Error("Cannot find module \'"+i+"\'");'
    'throw a.code="MODULE_NOT_FOUND",a}var p=n[i]={exports:{}};'
    "e[i][0].call(p.exports,function(r){var n=e[i][1][r];return o(n||r)},"
    "p,p.exports,r,e,n,t)}return n[i].exports}"
    'for(var u="function"==typeof require&&require,i=0;i<t.length;i++)o(t[i]);'
    "return o}return r})()"
)

_COMPACT = (",", ":")


def _json(value: Any) -> str:
    return json.dumps(value, separators=_COMPACT, ensure_ascii=False)


def _deps(deps: Mapping[str, Any] | None) -> str:
    items = sorted((deps or {}).items())
    return "{" + ",".join(f"{_json(k)}:{_json(v)}" for k, v in items) + "}"


def wrap_module(row: Mapping[str, Any], *, first: bool) -> str:
    """Return the module-table entry for ``row``; every entry but the first is comma-led."""
    return "".join(
        (
            "" if first else ",",
            _json(row["id"]),
            ":[function(require,module,exports){\n",
            str(row.get("source", "")),
            "\n},",
            _deps(row.get("deps")),
            "]",
        )
    )


def pack_chunks(rows: Iterable[Mapping[str, Any]]) -> Iterator[bytes]:
    """Yield the packed bundle as a stream of UTF-8 chunks."""
    yield f"{RUNTIME_PRELUDE}(".encode("utf-8")
    yield b"{"
    entries: list[Any] = []
    for i, row in enumerate(rows):
        if row.get("entry"):
            entries.append(row["id"])
        yield wrap_module(row, first=i == 0).encode("utf-8")
    yield f"}},{{}},{_json(entries)})".encode("utf-8")


def pack(rows: Iterable[Mapping[str, Any]]) -> bytes:
    """Return the whole packed bundle as one byte string."""
    return b"".join(pack_chunks(rows))


__all__ = ["RUNTIME_PRELUDE", "pack", "pack_chunks", "wrap_module"]
