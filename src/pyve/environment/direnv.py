"""
direnv activation (.envrc) and the project dotenv file (.env).
"""

import os
from pathlib import Path
from typing import Callable

from ..config.parser import DIRENV_FILE_NAME, ENV_FILE_NAME
from ..config.types import Backend

ENVRC_MARKER = "# pyve-managed: direnv"


def get_envrc_path(project_dir: Path) -> Path:
    return Path(project_dir) / DIRENV_FILE_NAME


def get_dotenv_path(project_dir: Path) -> Path:
    return Path(project_dir) / ENV_FILE_NAME


def render_envrc(backend: Backend, env_rel_path: str) -> str:
    """Contents of .envrc for an environment at env_rel_path (relative to the project)."""
    var = "CONDA_PREFIX" if backend == Backend.MICROMAMBA else "VIRTUAL_ENV"
    return (
        f"{ENVRC_MARKER}\n"
        f'export {var}="$PWD/{env_rel_path}"\n'
        f'PATH_add "{env_rel_path}/bin"\n'
        f"dotenv_if_exists {ENV_FILE_NAME}\n"
    )


def is_pyve_envrc(project_dir: Path) -> bool:
    path = get_envrc_path(project_dir)
    if not path.is_file():
        return False
    return ENVRC_MARKER in path.read_text()


def write_envrc(
    project_dir: Path,
    backend: Backend,
    env_rel_path: str,
    log: Callable[[str], None] = print,
) -> bool:
    """Write .envrc unless one already exists. Returns True if written."""
    path = get_envrc_path(project_dir)
    if path.exists():
        log(f"{DIRENV_FILE_NAME} already exists; leaving it unchanged")
        return False
    path.write_text(render_envrc(backend, env_rel_path))
    log(f"Created {DIRENV_FILE_NAME}. Run 'direnv allow' to activate the environment.")
    return True


def write_dotenv(project_dir: Path) -> bool:
    """Create an empty, owner-only .env unless one exists. Returns True if created."""
    path = get_dotenv_path(project_dir)
    if path.exists():
        return False
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    os.close(fd)
    os.chmod(path, 0o600)
    return True


def remove_envrc(project_dir: Path) -> bool:
    """Remove .envrc only if pyve wrote it."""
    if not is_pyve_envrc(project_dir):
        return False
    get_envrc_path(project_dir).unlink()
    return True


def remove_dotenv(project_dir: Path) -> bool:
    """Remove .env if it is empty."""
    path = get_dotenv_path(project_dir)
    if not path.is_file() or path.stat().st_size > 0:
        return False
    path.unlink()
    return True
