"""
Configuration parsing for pyve.

Project configuration lives in .pyve/config.toml:

    pyve_version = "0.9.0"
    backend = "venv"
    direnv = true

    [python]
    version = "3.11.5"

    [venv]
    directory = ".venv"

    [micromamba]
    env_name = "myproject"

    [created]          # files pyve created and purge may delete
    dotenv = true
"""

import copy
import re
from pathlib import Path
from typing import Any, Dict, Optional

import tomli
import tomli_w

from ..errors import ConfigError
from .types import AUTO_BACKEND, DEFAULT_VENV_DIR, Backend, ProjectConfig

CONFIG_DIR_NAME = ".pyve"
CONFIG_FILE_NAME = "config.toml"

PYTHON_VERSION_FILE = ".python-version"
ENV_FILE_NAME = ".env"
DIRENV_FILE_NAME = ".envrc"
GITIGNORE_FILE_NAME = ".gitignore"

RESERVED_VENV_DIR_NAMES = (
    ENV_FILE_NAME,
    ".git",
    GITIGNORE_FILE_NAME,
    ".tool-versions",
    PYTHON_VERSION_FILE,
    DIRENV_FILE_NAME,
)

_VERSION_RE = re.compile(r"^\d+\.\d+(\.\d+)?$")
_VENV_DIR_RE = re.compile(r"^[A-Za-z0-9._-]+$")


def get_config_path(project_dir: Path) -> Path:
    return Path(project_dir) / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def config_exists(project_dir: Path) -> bool:
    return get_config_path(project_dir).exists()


def load_project_config(project_dir: Path) -> Optional[ProjectConfig]:
    """
    Load .pyve/config.toml from a project directory.

    Args:
        project_dir: Project root.

    Returns:
        Parsed ProjectConfig, or None if the project has no config.

    Raises:
        ConfigError: If the file is not valid TOML or holds invalid values.
    """
    path = get_config_path(project_dir)
    if not path.exists():
        return None
    try:
        with open(path, "rb") as f:
            data = tomli.load(f)
    except tomli.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    return parse_config(data, source=path)


def parse_config(data: Dict[str, Any], source: Optional[Path] = None) -> ProjectConfig:
    """
    Parse TOML data into ProjectConfig.

    Unknown keys are kept in ProjectConfig.extra and written back unchanged.
    """
    data = copy.deepcopy(data)
    where = f" in {source}" if source else ""

    backend = data.pop("backend", None)
    if backend is not None:
        backend = parse_backend(str(backend), where)
        if backend is None:
            raise ConfigError(f"Backend cannot be '{AUTO_BACKEND}'{where}")

    pyve_version = data.pop("pyve_version", None)
    if pyve_version is not None:
        pyve_version = str(pyve_version)

    python_data = _section(data.pop("python", {}), "python", where)
    python_version = python_data.pop("version", None)
    if python_version is not None:
        python_version = validate_python_version(str(python_version))

    venv_data = _section(data.pop("venv", {}), "venv", where)
    venv_directory = validate_venv_dir_name(str(venv_data.pop("directory", DEFAULT_VENV_DIR)))

    mm_data = _section(data.pop("micromamba", {}), "micromamba", where)
    env_name = mm_data.pop("env_name", None)

    direnv = data.pop("direnv", True)
    if not isinstance(direnv, bool):
        raise ConfigError(f"'direnv' must be true or false{where}")

    created = _section(data.pop("created", {}), "created", where)
    dotenv_created = bool(created.pop("dotenv", False))
    gitignore_created = bool(created.pop("gitignore", False))

    return ProjectConfig(
        backend=backend,
        pyve_version=pyve_version,
        python_version=python_version,
        venv_directory=venv_directory,
        env_name=str(env_name) if env_name else None,
        direnv=direnv,
        dotenv_created=dotenv_created,
        gitignore_created=gitignore_created,
        extra=data,
    )


def config_to_dict(cfg: ProjectConfig) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if cfg.pyve_version:
        data["pyve_version"] = cfg.pyve_version
    if cfg.backend is not None:
        data["backend"] = cfg.backend.value
    data["direnv"] = cfg.direnv
    data.update(copy.deepcopy(cfg.extra))
    if cfg.python_version:
        data["python"] = {"version": cfg.python_version}
    if cfg.backend != Backend.MICROMAMBA:
        data["venv"] = {"directory": cfg.venv_directory}
    if cfg.env_name:
        data["micromamba"] = {"env_name": cfg.env_name}
    created = {}
    if cfg.dotenv_created:
        created["dotenv"] = True
    if cfg.gitignore_created:
        created["gitignore"] = True
    if created:
        data["created"] = created
    return data


def write_project_config(project_dir: Path, cfg: ProjectConfig) -> Path:
    """Write cfg to .pyve/config.toml, creating .pyve if needed."""
    path = get_config_path(project_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".toml.tmp")
    tmp.write_text(tomli_w.dumps(config_to_dict(cfg)))
    tmp.replace(path)
    return path


def parse_backend(value: str, where: str = "") -> Optional[Backend]:
    """
    Parse a backend name.

    Returns:
        The Backend, or None for "auto".

    Raises:
        ConfigError: For anything else.
    """
    value = value.strip().lower()
    if value == AUTO_BACKEND:
        return None
    try:
        return Backend(value)
    except ValueError:
        valid = ", ".join([b.value for b in Backend] + [AUTO_BACKEND])
        raise ConfigError(f"Invalid backend '{value}'{where}. Valid backends: {valid}") from None


def is_python_version(value: str) -> bool:
    """True if value looks like MAJOR.MINOR[.PATCH]."""
    return bool(_VERSION_RE.match(value.strip()))


def validate_python_version(version: str) -> str:
    """Check MAJOR.MINOR[.PATCH] format and return the stripped version."""
    version = version.strip()
    if not version:
        raise ConfigError("Python version cannot be empty.")
    if not _VERSION_RE.match(version):
        raise ConfigError(
            f"Invalid Python version format '{version}'. Expected format: #.#.# (e.g., 3.13.7)"
        )
    return version


def validate_venv_dir_name(name: str) -> str:
    """Check a venv directory name is a plain, non-reserved path component."""
    if not name:
        raise ConfigError("Virtual environment directory name cannot be empty.")
    if not _VENV_DIR_RE.match(name) or name in (".", ".."):
        raise ConfigError(
            f"Invalid directory name '{name}'. Use only alphanumeric characters, "
            "dots, underscores, and hyphens."
        )
    if name in RESERVED_VENV_DIR_NAMES or name == CONFIG_DIR_NAME:
        raise ConfigError(f"Directory name '{name}' is reserved and cannot be used.")
    return name


def _section(value: Any, name: str, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] must be a table{where}")
    return dict(value)
