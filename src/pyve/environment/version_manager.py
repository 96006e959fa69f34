"""
Python interpreters via asdf / pyenv, with PATH fallbacks.
"""

import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from ..detection import tools
from ..detection.tools import ASDF, PYENV, VersionManager
from ..detection.version import major_minor, same_series
from ..errors import CommandFailed, PyveError
from ..process import run_command

logger = logging.getLogger("pyve")


def _lines(output: str):
    return [line.strip().lstrip("*").strip() for line in output.splitlines() if line.strip()]


def is_version_installed(manager: VersionManager, version: str) -> bool:
    if manager.name == ASDF:
        result = run_command([manager.path, "list", "python"], check=False)
    elif manager.name == PYENV:
        result = run_command([manager.path, "versions", "--bare"], check=False)
    else:
        return False
    return result.returncode == 0 and version in _lines(result.stdout)


def is_version_available(manager: VersionManager, version: str) -> bool:
    """True if the manager knows how to install version."""
    if manager.name == ASDF:
        result = run_command([manager.path, "list", "all", "python"], check=False)
    elif manager.name == PYENV:
        result = run_command([manager.path, "install", "--list"], check=False)
    else:
        return False
    return result.returncode == 0 and version in _lines(result.stdout)


def install_version(
    manager: VersionManager,
    version: str,
    log: Callable[[str], None] = print,
) -> None:
    """
    Install a Python version through the version manager.

    Raises:
        PyveError: If the version is unknown to the manager.
        CommandFailed: If the install command fails.
    """
    if not is_version_available(manager, version):
        raise PyveError(
            f"Python {version} is not available from {manager.name}. "
            f"List versions with: "
            + ("asdf list all python" if manager.name == ASDF else "pyenv install --list")
        )
    log(f"Installing Python {version} with {manager.name} (this may take a few minutes) ...")
    if manager.name == ASDF:
        run_command([manager.path, "install", "python", version])
    else:
        run_command([manager.path, "install", "-s", version])


def get_interpreter(manager: VersionManager, version: str) -> Optional[Path]:
    """Interpreter the manager installed for version, or None."""
    if manager.name == ASDF:
        command = [manager.path, "where", "python", version]
    elif manager.name == PYENV:
        command = [manager.path, "prefix", version]
    else:
        return None
    try:
        result = run_command(command)
    except CommandFailed:
        return None
    prefix = result.stdout.strip()
    if not prefix:
        return None
    python = Path(prefix) / "bin" / "python"
    return python if python.exists() else None


def find_python(version: str, manager: Optional[VersionManager] = None) -> Optional[Path]:
    """
    Find an interpreter for version.

    Order:
    1. The version manager's install of that exact version
    2. The interpreter running pyve, if MAJOR.MINOR matches
    3. pythonX.Y on PATH
    """
    if manager is not None:
        python = get_interpreter(manager, version)
        if python:
            logger.debug("python %s from %s: %s", version, manager.name, python)
            return python

    current = "{}.{}.{}".format(*sys.version_info[:3])
    if same_series(current, version):
        logger.debug("python %s from current interpreter: %s", version, sys.executable)
        return Path(sys.executable)

    on_path = tools.find_executable(f"python{major_minor(version)}")
    if on_path:
        logger.debug("python %s from PATH: %s", version, on_path)
        return Path(on_path)
    return None
