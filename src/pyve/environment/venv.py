"""
venv backend - create and inspect `python -m venv` environments.
"""

from pathlib import Path
from typing import Callable, List, Optional, Union

from ..process import run_command
from .paths import get_python_executable

PYVENV_CFG = "pyvenv.cfg"


def is_venv(env_path: Path) -> bool:
    return (Path(env_path) / PYVENV_CFG).is_file()


def create_venv(
    python: Union[str, Path],
    env_path: Path,
    log: Callable[[str], None] = print,
) -> Path:
    """
    Create a virtual environment with the given interpreter.

    Args:
        python: Interpreter to run `-m venv` with.
        env_path: Target directory.
        log: Logging callback.

    Returns:
        Path to the environment's python executable.

    Raises:
        CommandFailed: If `python -m venv` exits non-zero.
    """
    log(f"Creating virtual environment in {env_path} ...")
    run_command([python, "-m", "venv", env_path])
    return get_python_executable(env_path)


def read_pyvenv_cfg(env_path: Path) -> dict:
    """Parse pyvenv.cfg into a dict ({} if missing)."""
    path = Path(env_path) / PYVENV_CFG
    if not path.is_file():
        return {}
    values = {}
    for line in path.read_text().splitlines():
        key, sep, value = line.partition("=")
        if sep:
            values[key.strip()] = value.strip()
    return values


def get_venv_python_version(env_path: Path) -> Optional[str]:
    """Python version the venv was created with, from pyvenv.cfg."""
    cfg = read_pyvenv_cfg(env_path)
    return cfg.get("version") or cfg.get("version_info")


def pip_install(
    python: Union[str, Path],
    packages: List[str],
    log: Callable[[str], None] = print,
) -> None:
    """Install packages into the environment owning `python`."""
    log(f"Installing {', '.join(packages)} ...")
    run_command([python, "-m", "pip", "install", *packages])
