from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from typing import Any, List, Optional

import typer

from bundle_splitter.config import load_spec, write_options

app = typer.Typer(add_completion=False, no_args_is_help=True)

_LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _spec_path_candidates(path: str | Path) -> Iterator[Path]:
    """Yield potential spec locations without hitting the filesystem."""
    candidate = Path(path)
    pkg_dir = Path(__file__).resolve().parent
    yield from (candidate, pkg_dir.parent / candidate, pkg_dir / candidate)


def _resolve_spec_path(path: str | Path) -> Path:
    """Pick the first existing pipeline spec from candidate locations."""
    return next((p for p in _spec_path_candidates(path) if p.exists()), Path(path))


def _format_timings(timings: Mapping[str, float]) -> str:
    """Return ``timings`` as newline-delimited ``name: seconds`` strings."""
    return "\n".join(f"{n}: {t:.3f}s" for n, t in timings.items())


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format=_LOG_FORMAT,
    )


def _exit_with_error(exc: Exception) -> None:
    """Print ``exc`` to stderr and exit with status 1."""
    print(f"error: {exc}", file=sys.stderr)
    raise typer.Exit(1)


def _safe(func: Callable[[], None]) -> None:
    """Invoke ``func`` and exit non-zero on any exception."""
    try:
        func()
    except Exception as exc:
        _exit_with_error(exc)


def _cli_overrides(
    out: Path | None, verbose: bool, workers: int | None
) -> dict[str, dict[str, Any]]:
    write_opts = {
        k: v
        for k, v in {
            "write_to_dir": str(out) if out else None,
            "verbose": True if verbose else None,
            "workers": workers,
        }.items()
        if v is not None
    }
    return {"write_units": write_opts} if write_opts else {}


def _run_split(
    input_path: Path,
    out: Path | None,
    spec: str,
    verbose: bool,
    workers: int | None,
) -> None:
    from bundle_splitter.core import run_split

    s = load_spec(_resolve_spec_path(spec), overrides=_cli_overrides(out, verbose, workers))
    verbose = write_options(s).verbose
    _configure_logging(verbose)
    artifact, timings = run_split(s, input_path)
    if verbose:
        print(_format_timings(timings))
    units = artifact.payload["units"]
    print(f"split: OK ({sum(u.kind == 'module' for u in units)} modules)")


def _run_join(directory: Path, modules: list[str] | None, out: Path | None) -> None:
    from bundle_splitter.adapters.reassemble import reassemble

    data = reassemble(directory, modules or None)
    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(data)
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()


def _run_inspect() -> None:
    from bundle_splitter.core import run_inspect

    print(json.dumps(run_inspect(), indent=2))


@app.command()
def split(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    out: Optional[Path] = typer.Option(None, "--out", help="Directory for the split units."),
    spec: str = typer.Option("pipeline.yaml", "--spec"),
    verbose: bool = typer.Option(False, "--verbose"),
    workers: Optional[int] = typer.Option(None, "--workers", min=1),
) -> None:
    """Split a packed bundle into prelude, one unit per module, and postlude."""
    _safe(lambda: _run_split(input_path, out, spec, verbose, workers))


@app.command()
def join(
    directory: Path = typer.Argument(..., exists=True, file_okay=False),
    module: Optional[List[str]] = typer.Option(None, "--module", "-m"),
    out: Optional[Path] = typer.Option(None, "--out"),
) -> None:
    """Rebuild a bundle from split units (all modules unless --module is given)."""
    _safe(lambda: _run_join(directory, module, out))


@app.command()
def inspect() -> None:
    """Show the registered passes."""
    _run_inspect()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
