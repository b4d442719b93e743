"""Central configuration and constants for ``mincov``."""

from __future__ import annotations

import json
import os
import tomllib
from functools import cache
from importlib import resources
from pathlib import Path

from mincov._meta import logger

# Default logging format used by the CLI entry point.
LOG_FORMAT = "%(levelname)s: %(message)s"

# Environment variables consulted when the CLI options are not given.
JACOCO_CLI_ENV = "MINCOV_JACOCO_CLI"
JAVA_ENV = "MINCOV_JAVA"

DEFAULT_JAVA = "java"


@cache
def get_schema() -> dict[str, object]:
    """Load and cache the JSON schema of the minimal report."""
    return json.loads(resources.files("mincov.data").joinpath("schema.json").read_text(encoding="utf-8"))


def _get_jacoco_cli_from_pyproject(pyproject: Path) -> str | None:
    """Extract the JaCoCo CLI jar location from ``[tool.mincov]``."""
    try:
        with pyproject.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to parse %s: %s", pyproject, e)
        return None

    value = data.get("tool", {}).get("mincov", {}).get("jacoco_cli")
    return value if isinstance(value, str) and value.strip() else None


def resolve_jacoco_cli(explicit: Path | None = None, *, cwd: Path | None = None) -> Path | None:
    """Locate the JaCoCo CLI jar.

    Lookup order: the explicit value, the ``MINCOV_JACOCO_CLI`` environment
    variable, then ``[tool.mincov] jacoco_cli`` in ``pyproject.toml`` of *cwd*.
    """
    if explicit is not None:
        return explicit

    from_env = os.environ.get(JACOCO_CLI_ENV, "").strip()
    if from_env:
        return Path(from_env)

    pyproject = (cwd or Path.cwd()) / "pyproject.toml"
    if pyproject.exists():
        configured = _get_jacoco_cli_from_pyproject(pyproject)
        if configured:
            logger.info("Using JaCoCo CLI from config: %s", configured)
            return Path(configured)

    return None


def resolve_java(explicit: str | None = None) -> str:
    """Return the java executable to launch the JaCoCo CLI with."""
    if explicit:
        return explicit
    return os.environ.get(JAVA_ENV, "").strip() or DEFAULT_JAVA


__all__ = [
    "DEFAULT_JAVA",
    "JACOCO_CLI_ENV",
    "JAVA_ENV",
    "LOG_FORMAT",
    "get_schema",
    "resolve_jacoco_cli",
    "resolve_java",
]
