"""
External tool detection - asdf, pyenv and direnv.

All lookups go through find_executable() so callers (and tests) have a
single place that decides what is on PATH.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger("pyve")

ASDF = "asdf"
PYENV = "pyenv"


def find_executable(name: str) -> Optional[str]:
    """Locate an executable on PATH."""
    return shutil.which(name)


@dataclass
class VersionManager:
    """A detected Python version manager."""
    name: str  # asdf, pyenv
    path: str


def _asdf_has_python_plugin(asdf: str) -> bool:
    try:
        result = subprocess.run(
            [asdf, "plugin", "list"], capture_output=True, text=True, timeout=30
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return "python" in result.stdout.split()


def detect_version_manager() -> Optional[VersionManager]:
    """
    Detect a Python version manager, preferring asdf (with its python
    plugin) over pyenv.
    """
    asdf = find_executable(ASDF)
    if asdf:
        if _asdf_has_python_plugin(asdf):
            return VersionManager(ASDF, asdf)
        logger.warning("asdf found but Python plugin not installed (asdf plugin add python)")

    pyenv = find_executable(PYENV)
    if pyenv:
        return VersionManager(PYENV, pyenv)

    return None


def find_direnv() -> Optional[str]:
    return find_executable("direnv")
