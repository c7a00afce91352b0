"""Unit sinks: where split bundle pieces end up."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Protocol

from bundle_splitter.units import OutputUnit, unit_path

logger = logging.getLogger(__name__)


class UnitSink(Protocol):
    def __call__(self, unit: OutputUnit) -> Any:
        """Persist ``unit``; the return value is collected by :func:`write_units`."""
        ...


class FileSink:
    """Write each unit to ``out_dir / unit.name``, never outside ``out_dir``."""

    def __init__(self, out_dir: str | Path, verbose: bool = False) -> None:
        self.out_dir = Path(out_dir)
        self.verbose = verbose

    def __call__(self, unit: OutputUnit) -> Path:
        path = unit_path(self.out_dir, unit.name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(unit.content)
        logger.log(
            logging.INFO if self.verbose else logging.DEBUG,
            "written: %s => %s",
            unit.label,
            path,
        )
        return path


class MemorySink:
    """Keep units in memory, keyed by name."""

    def __init__(self) -> None:
        self.units: dict[str, OutputUnit] = {}

    def __call__(self, unit: OutputUnit) -> str:
        self.units[unit.name] = unit
        return unit.name

    def content(self, name: str) -> bytes:
        return self.units[name].content


def write_units(units: Iterable[OutputUnit], sink: UnitSink, workers: int = 1) -> list[Any]:
    """Hand every unit to ``sink`` and return the sink results in unit order.

    Units are drawn from ``units`` sequentially. With ``workers > 1`` the sink
    calls run on a thread pool; all of them complete (or the first failure is
    raised) before this returns.
    """
    if workers <= 1:
        return [sink(u) for u in units]
    with ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(sink, u) for u in units]
        return [f.result() for f in futures]


__all__ = ["FileSink", "MemorySink", "UnitSink", "write_units"]
