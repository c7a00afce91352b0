"""Descriptor collection from the stream of upstream module records."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any, overload

from bundle_splitter.units import ModuleDescriptor

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


class ModuleCollector(Sequence[ModuleDescriptor]):
    """Ordered descriptor list filled by :func:`collect_modules`.

    The classifier reads it as a plain sequence. ``closed`` stays ``False``
    until the host declares collection complete; a classifier that reaches
    the module zone of the stream before that fails fast.
    """

    def __init__(self, descriptors: Iterable[ModuleDescriptor] = ()) -> None:
        self._items: list[ModuleDescriptor] = list(descriptors)
        self._closed = False

    @overload
    def __getitem__(self, index: int) -> ModuleDescriptor: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[ModuleDescriptor]: ...

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"ModuleCollector({len(self._items)} modules, {state})"

    @property
    def closed(self) -> bool:
        return self._closed

    def append(self, descriptor: ModuleDescriptor) -> None:
        if self._closed:
            raise RuntimeError("module collection is closed")
        self._items.append(descriptor)

    def close(self) -> ModuleCollector:
        self._closed = True
        logger.debug("collected %d module descriptor(s)", len(self._items))
        return self


def collect_modules(rows: Iterable[Row], into: Any = None) -> Iterator[Row]:
    """Append a descriptor per record to ``into`` and pass each record through.

    ``into`` is any object with ``append`` (a list or a
    :class:`ModuleCollector`); records are re-yielded unchanged so the
    collector can sit inline in a record stream.
    """
    target = into if into is not None else ModuleCollector()
    for row in rows:
        target.append(ModuleDescriptor.from_row(row))
        yield row


def descriptors_from_rows(rows: Iterable[Row]) -> ModuleCollector:
    """Drain ``rows`` and return the closed collection."""
    collector = ModuleCollector()
    for _ in collect_modules(rows, collector):
        pass
    return collector.close()


__all__ = ["ModuleCollector", "collect_modules", "descriptors_from_rows"]
