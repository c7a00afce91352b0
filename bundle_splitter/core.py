from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import fields, is_dataclass, replace
from pathlib import Path
from typing import Any

from bundle_splitter.adapters.io_rows import read_input
from bundle_splitter.adapters.sinks import FileSink, UnitSink, write_units
from bundle_splitter.config import PipelineSpec, write_options
from bundle_splitter.framework import Artifact, Pass, registry, run_pipeline

logger = logging.getLogger(__name__)


def _pass_steps(spec: PipelineSpec) -> list[str]:
    """Return the declared steps; error on ones that are not registered."""
    regs = registry()
    unknown = [s for s in spec.pipeline if s not in regs]
    if unknown:
        raise KeyError(f"unknown steps: {unknown}")
    return list(spec.pipeline)


def _ensure_collect_precedes_split(steps: list[str]) -> None:
    """Descriptors must be complete before any chunk is classified."""
    if "split_bundle" not in steps:
        return
    split_at = steps.index("split_bundle")
    if "collect_modules" not in steps[:split_at]:
        raise ValueError("split_bundle requires collect_modules to run beforehand")


def configure_pass(pass_obj: Pass, opts: Mapping[str, Any]) -> Pass:
    """Return a copy of a dataclass pass with matching ``opts`` applied."""
    if not opts or not is_dataclass(pass_obj):
        return pass_obj
    names = {f.name for f in fields(pass_obj)} - {"name", "input_type", "output_type"}
    updates = {k: v for k, v in opts.items() if k in names}
    return replace(pass_obj, **updates) if updates else pass_obj


def input_artifact(path: str | Path) -> Artifact:
    abs_path = str(Path(path).resolve())
    return Artifact(payload=read_input(path), meta={"metrics": {}, "input": abs_path})


def run_passes(spec: PipelineSpec, a: Artifact) -> tuple[Artifact, dict[str, float]]:
    """Run the declared passes over ``a`` capturing per-pass timings."""
    steps = _pass_steps(spec)
    _ensure_collect_precedes_split(steps)
    passes = [configure_pass(registry()[s], spec.step_options(s)) for s in steps]
    return run_pipeline(passes, a)


def emit_units(a: Artifact, sink: UnitSink, workers: int = 1) -> list[Any]:
    """Hand the units of a split artifact to ``sink``."""
    if a.kind != "output_units":
        raise ValueError("pipeline did not produce output units; is split_bundle declared?")
    return write_units(a.payload["units"], sink, workers=workers)


def run_split(spec: PipelineSpec, input_path: str | Path) -> tuple[Artifact, dict[str, float]]:
    """Split the bundle described by ``input_path`` and write its units to disk."""
    opts = write_options(spec)
    a, timings = run_passes(spec, input_artifact(input_path))
    sink = FileSink(opts.write_to_dir, verbose=opts.verbose)
    written = emit_units(a, sink, workers=opts.workers)
    logger.info("wrote %d unit(s) to %s", len(written), opts.write_to_dir)
    meta = {**(a.meta or {}), "written": [str(p) for p in written]}
    return Artifact(payload=a.payload, meta=meta), timings


def run_inspect() -> dict[str, dict[str, str]]:
    """Return a lightweight view of the registry for CLI/tests."""
    return {
        name: {"input": str(p.input_type), "output": str(p.output_type)}
        for name, p in registry().items()
    }
