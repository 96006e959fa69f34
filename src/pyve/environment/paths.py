"""Environment path utilities."""

import sys
from pathlib import Path
from typing import Optional

from ..config.parser import CONFIG_DIR_NAME
from ..config.types import DEFAULT_VENV_DIR, Backend, ProjectConfig

ENVS_DIR_NAME = "envs"
TESTENV_DIR_NAME = "testenv"


def get_pyve_dir(project_dir: Path) -> Path:
    return Path(project_dir) / CONFIG_DIR_NAME


def get_venv_path(project_dir: Path, venv_dir: str = DEFAULT_VENV_DIR) -> Path:
    return Path(project_dir) / venv_dir


def get_micromamba_prefix(project_dir: Path, env_name: str) -> Path:
    """Micromamba environments live under .pyve/envs/<name>."""
    return get_pyve_dir(project_dir) / ENVS_DIR_NAME / env_name


def get_testenv_dir(project_dir: Path) -> Path:
    return get_pyve_dir(project_dir) / TESTENV_DIR_NAME


def get_testenv_path(project_dir: Path) -> Path:
    """The pytest runner venv, kept apart from the project environment."""
    return get_testenv_dir(project_dir) / "venv"


def get_bin_dir(env_path: Path) -> Path:
    if sys.platform == "win32":
        return Path(env_path) / "Scripts"
    return Path(env_path) / "bin"


def get_python_executable(env_path: Path) -> Path:
    if sys.platform == "win32":
        return get_bin_dir(env_path) / "python.exe"
    return get_bin_dir(env_path) / "python"


def get_env_path(project_dir: Path, cfg: ProjectConfig) -> Optional[Path]:
    """
    Path of the configured project environment.

    Returns None for a micromamba config without an environment name.
    """
    if cfg.backend == Backend.MICROMAMBA:
        if not cfg.env_name:
            return None
        return get_micromamba_prefix(project_dir, cfg.env_name)
    return get_venv_path(project_dir, cfg.venv_directory)
