"""Pass registry and the artifact that flows between bundle passes."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Artifact:
    """Immutable carrier of a bundle payload plus run metadata."""

    payload: Any
    meta: dict[str, Any] | None = None

    @property
    def kind(self) -> str | None:
        """Return the payload ``type`` tag when the payload is a mapping."""
        return self.payload.get("type") if isinstance(self.payload, Mapping) else None

    def evolve(self, **payload_updates: Any) -> Artifact:
        """Return a copy whose mapping payload is updated with ``payload_updates``."""
        return Artifact(payload={**self.payload, **payload_updates}, meta=self.meta)

    def with_metrics(self, step: str, metrics: Mapping[str, Any]) -> Artifact:
        """Return a copy with ``metrics`` merged under ``meta["metrics"][step]``."""
        meta = dict(self.meta or {})
        all_metrics = dict(meta.get("metrics") or {})
        all_metrics[step] = {**(all_metrics.get(step) or {}), **metrics}
        return Artifact(payload=self.payload, meta={**meta, "metrics": all_metrics})


@runtime_checkable
class Pass(Protocol):
    name: str
    input_type: str
    output_type: str

    def __call__(self, a: Artifact) -> Artifact:
        """Execute the pass."""
        ...


_REGISTRY: Mapping[str, Pass] = MappingProxyType({})


def register(p: Pass) -> Pass:
    """Register a pass by name; re-registering a name replaces the old pass."""
    global _REGISTRY
    _REGISTRY = MappingProxyType({**dict(_REGISTRY), p.name: p})
    return p


def run_step(name: str, a: Artifact) -> Artifact:
    """Run a single registered step."""
    return _REGISTRY[name](a)


def run_pipeline(steps: Iterable[str | Pass], a: Artifact) -> tuple[Artifact, dict[str, float]]:
    """Apply ``steps`` in order, recording wall time per step.

    A step is a registered pass name or a pass object (e.g. one configured
    with options); timings are keyed by pass name.
    """
    timings: dict[str, float] = {}
    for step in steps:
        p = _REGISTRY[step] if isinstance(step, str) else step
        t0 = time.perf_counter()
        try:
            a = p(a)
        except Exception:
            logger.error("pass %s failed after %.3fs", p.name, time.perf_counter() - t0)
            raise
        finally:
            timings[p.name] = time.perf_counter() - t0
    return a, timings


def registry() -> dict[str, Pass]:
    """Shallow copy of the registry for inspection/testing."""
    return dict(_REGISTRY)
