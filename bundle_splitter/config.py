from __future__ import annotations

import os
import pathlib
import warnings
from functools import reduce
from typing import Any, Dict, Iterable, List, Mapping

import yaml
from pydantic import BaseModel, Field

DEFAULT_PIPELINE: tuple[str, ...] = ("collect_modules", "pack_bundle", "split_bundle")

# Option groups consumed outside the pass registry.
_SINK_STEPS = frozenset({"write_units"})


class PipelineSpec(BaseModel):
    """Declarative pipeline specification."""

    pipeline: List[str] = Field(default_factory=lambda: list(DEFAULT_PIPELINE))
    options: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    def step_options(self, step: str) -> Dict[str, Any]:
        return dict(self.options.get(step, {}))


class WriteOptions(BaseModel):
    """Options for persisting split units."""

    write_to_dir: str
    verbose: bool = False
    workers: int = Field(default=1, ge=1)


def _read_yaml(path: str | os.PathLike | None) -> Dict[str, Any]:
    """Return a dict from YAML or {} if path is None/missing/empty."""
    if not path:
        return {}
    p = pathlib.Path(path)
    if not p.exists():
        return {}
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise TypeError("pipeline.yaml must contain a top-level mapping")
    return data


def _coerce(value: str) -> Any:
    try:
        return yaml.safe_load(value)
    except yaml.YAMLError:
        return value


def _env_overrides(environ: Mapping[str, str] | None = None) -> Dict[str, Dict[str, Any]]:
    """
    Map STEP__key=value -> options[step][key]=value (step/key lower-cased).
    Values are YAML-coerced (so 'true', '42' etc. become bool/int).
    """
    out: Dict[str, Dict[str, Any]] = {}
    for k, v in (os.environ if environ is None else environ).items():
        if "__" not in k:
            continue
        step, key = k.lower().split("__", 1)
        if not step or not key:
            continue
        out.setdefault(step, {})[key] = _coerce(v)
    return out


def _merge_options(
    base: Dict[str, Dict[str, Any]], override: Dict[str, Dict[str, Any]]
) -> Dict[str, Dict[str, Any]]:
    """Shallow-merge per-step options; override wins."""
    sources = set(base) | set(override)
    return {s: {**base.get(s, {}), **override.get(s, {})} for s in sources}


def _warn_unknown_options(pipeline: Iterable[str], opts: Mapping[str, Any]) -> None:
    """Emit a warning when options name steps that are neither passes nor sinks."""
    known = set(pipeline) | _SINK_STEPS
    unknown = [step for step in opts if step not in known]
    if unknown:
        warnings.warn(
            f"Unknown pipeline options: {', '.join(sorted(unknown))}",
            stacklevel=2,
        )


def load_spec(
    path: str | os.PathLike | None = "pipeline.yaml",
    overrides: Dict[str, Dict[str, Any]] | None = None,
    environ: Mapping[str, str] | None = None,
) -> PipelineSpec:
    """Load YAML + env/CLI overrides into a validated PipelineSpec."""
    data = _read_yaml(path)
    opts = data.get("options") or {}
    env = _env_overrides(environ)
    pipeline = data.get("pipeline") or list(DEFAULT_PIPELINE)
    # Environment variables only count when they name a step we know about.
    env = {k: v for k, v in env.items() if k in set(pipeline) | _SINK_STEPS}
    sources: Iterable[Dict[str, Dict[str, Any]]] = (
        d for d in (opts, env, overrides) if d
    )
    acc: Dict[str, Dict[str, Any]] = {}
    merged = reduce(_merge_options, sources, acc)

    _warn_unknown_options(pipeline, merged)
    return PipelineSpec.model_validate({**data, "pipeline": pipeline, "options": merged})


def write_options(spec: PipelineSpec) -> WriteOptions:
    """Validate the sink options; a destination directory is mandatory."""
    opts = spec.step_options("write_units")
    target = opts.get("write_to_dir")
    if not isinstance(target, str) or not target:
        raise ValueError('splitting requires the "write_to_dir" option to be set')
    return WriteOptions.model_validate(opts)
