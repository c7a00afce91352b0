"""Nox automation sessions for bundle_splitter."""

from __future__ import annotations

from pathlib import Path

import nox

nox.options.sessions = ("lint", "typecheck", "tests")
nox.options.reuse_existing_virtualenvs = True

PROJECT_ROOT = Path(__file__).parent


def _install_project(session: nox.Session) -> None:
    requirements = PROJECT_ROOT / "requirements.txt"
    if requirements.exists():
        session.install("-r", str(requirements))
    session.install("-e", ".")


@nox.session()
def lint(session: nox.Session) -> None:
    session.install("black", "flake8")
    session.run("black", "--check", "bundle_splitter", "tests")
    session.run("flake8", "--max-line-length", "100", "bundle_splitter", "tests")


@nox.session()
def typecheck(session: nox.Session) -> None:
    session.install("mypy", "types-PyYAML")
    _install_project(session)
    session.run("mypy", "bundle_splitter")


@nox.session()
def tests(session: nox.Session) -> None:
    _install_project(session)
    session.install("pytest")
    session.run("pytest", "tests")
