"""Module descriptors and the output units produced by splitting a bundle."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Literal

ModuleId = str | int
UnitKind = Literal["module", "prelude", "postlude"]

PRELUDE_NAME = "prelude"
POSTLUDE_NAME = "postlude"
UNIT_SUFFIX = ".js"
PRELUDE_LABEL = "(prelude)"
POSTLUDE_LABEL = "(postlude)"


class DescriptorSequencingError(LookupError):
    """A module chunk arrived before its descriptor was collected."""


@dataclass(frozen=True)
class ModuleDescriptor:
    """One module expected in the packed stream, in emission order."""

    id: ModuleId
    source_label: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ModuleDescriptor:
        """Build a descriptor from an upstream module record (``id``, ``file``)."""
        return cls(id=row["id"], source_label=str(row.get("file") or ""))


def unit_name(stem: ModuleId) -> str:
    """Return the storage name for ``stem`` (a module id or a wrapper name)."""
    return f"{stem}{UNIT_SUFFIX}"


PRELUDE_FILE = unit_name(PRELUDE_NAME)
POSTLUDE_FILE = unit_name(POSTLUDE_NAME)


def unit_path(base: str | os.PathLike, name: str) -> Path:
    """Map a unit name to its location under ``base``.

    Absolute names lose their root, so ``/src/a.js`` lands at
    ``base/src/a.js``. Names that climb out of ``base`` through ``..`` raise
    :class:`ValueError`.
    """
    pure = PurePosixPath(name)
    parts = pure.parts[1:] if pure.is_absolute() else pure.parts
    root = Path(os.path.normpath(base))
    path = Path(os.path.normpath(root.joinpath(*parts)))
    if path == root or not path.is_relative_to(root):
        raise ValueError(f"unit name {name!r} resolves outside {root}")
    return path


@dataclass(frozen=True)
class OutputUnit:
    """An independently storable piece of the split bundle."""

    name: str
    label: str
    content: bytes

    @property
    def kind(self) -> UnitKind:
        if self.name == PRELUDE_FILE:
            return "prelude"
        if self.name == POSTLUDE_FILE:
            return "postlude"
        return "module"

    @classmethod
    def for_module(cls, descriptor: ModuleDescriptor, content: bytes) -> OutputUnit:
        return cls(unit_name(descriptor.id), descriptor.source_label, content)


__all__ = [
    "DescriptorSequencingError",
    "ModuleDescriptor",
    "ModuleId",
    "OutputUnit",
    "POSTLUDE_FILE",
    "POSTLUDE_LABEL",
    "POSTLUDE_NAME",
    "PRELUDE_FILE",
    "PRELUDE_LABEL",
    "PRELUDE_NAME",
    "UNIT_SUFFIX",
    "unit_name",
    "unit_path",
]
