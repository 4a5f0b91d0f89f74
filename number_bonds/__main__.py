from __future__ import annotations

import os
import sys
from pathlib import Path

from loguru import logger

LOG_LEVEL_ENV = "NUMBER_BONDS_LOG_LEVEL"


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    If this module is executed as a script (``python number_bonds/__main__.py``),
    the package may not be discoverable by Python. This helper inserts the
    parent directory of the package into ``sys.path`` so that imports resolve
    correctly.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root = pkg_dir.parent
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    # Works when executed as a module: python -m number_bonds
    from .app import run  # type: ignore[attr-defined]
except ImportError:
    # Works when executed as a script (IDE "Run Python File", absolute path, etc.)
    _ensure_repo_root_on_path()
    from number_bonds.app import run  # type: ignore[attr-defined]


def configure_logging() -> str:
    """Route loguru to stderr at NUMBER_BONDS_LOG_LEVEL (WARNING if unset or unknown)."""
    raw = os.environ.get(LOG_LEVEL_ENV, "").strip()
    level = raw.upper() or "WARNING"
    try:
        logger.level(level)
    except ValueError:
        level = "WARNING"
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if raw and level != raw.upper():
        logger.warning("Ignoring unknown {}={!r}", LOG_LEVEL_ENV, raw)
    return level


def main() -> int:
    """Entry point for running the trainer from the command line."""
    configure_logging()
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
