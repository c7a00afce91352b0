"""Rebuild a bundle from split units stored in a directory."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from bundle_splitter.units import POSTLUDE_FILE, PRELUDE_FILE, UNIT_SUFFIX, unit_name, unit_path

logger = logging.getLogger(__name__)

_WRAPPERS = frozenset({PRELUDE_FILE, POSTLUDE_FILE})


def module_ids(directory: str | Path) -> list[str]:
    """Return the ids of all module units under ``directory``, sorted.

    Ids containing ``/`` are stored in subdirectories; they are listed by
    their POSIX path relative to ``directory``.
    """
    base = Path(directory)
    names = (
        p.relative_to(base).as_posix() for p in base.rglob(f"*{UNIT_SUFFIX}") if p.is_file()
    )
    return sorted(n[: -len(UNIT_SUFFIX)] for n in names if n not in _WRAPPERS)


def reassemble(directory: str | Path, ids: Iterable[str | int] | None = None) -> bytes:
    """Concatenate prelude, the selected module units and postlude.

    ``ids`` picks modules and their order; ``None`` takes every module unit
    under the directory. A missing unit raises :class:`FileNotFoundError`.
    """
    base = Path(directory)
    selected = module_ids(base) if ids is None else list(ids)
    names = [PRELUDE_FILE, *(unit_name(i) for i in selected), POSTLUDE_FILE]
    logger.debug("reassembling %d module(s) from %s", len(selected), base)
    return b"".join(unit_path(base, n).read_bytes() for n in names)


__all__ = ["module_ids", "reassemble"]
