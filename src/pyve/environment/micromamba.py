"""
micromamba backend - environment files, names and prefixes.

Environments are created as prefixes under .pyve/envs/<name> from either
conda-lock.yml (preferred, reproducible) or environment.yml.
"""

import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import yaml

from ..config.types import ProjectConfig
from ..detection.backend import ENVIRONMENT_FILE, LOCK_FILE
from ..errors import ConfigError
from ..process import run_command


RESERVED_ENV_NAMES = ("base", "root", "default", "conda", "mamba", "micromamba")
MAX_ENV_NAME_LENGTH = 255

_ENV_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_PYTHON_PIN_RE = re.compile(r"^python\s*(?:[=<>!~]=?|\s)\s*([0-9][0-9.*]*)")


def detect_environment_file(project_dir: Path) -> Optional[Path]:
    """Return conda-lock.yml if present, else environment.yml, else None."""
    for name in (LOCK_FILE, ENVIRONMENT_FILE):
        path = Path(project_dir) / name
        if path.is_file():
            return path
    return None


def load_environment_file(path: Path) -> Dict[str, Any]:
    """
    Parse a conda environment or lock file.

    Raises:
        ConfigError: If the file is not a YAML mapping.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a YAML mapping")
    return data


def validate_environment_file(path: Path) -> List[str]:
    """
    Validate an environment file.

    Returns:
        Warning messages (missing name or channels).

    Raises:
        ConfigError: If the file is unparseable or declares no dependencies.
    """
    data = load_environment_file(path)
    if path.name == LOCK_FILE:
        if not data.get("package"):
            raise ConfigError(f"{path} lists no packages")
        return []

    if not data.get("dependencies"):
        raise ConfigError(f"No dependencies found in {path}")

    warnings = []
    if not data.get("name"):
        warnings.append(f"No 'name:' field in {path.name}; the directory name will be used")
    if not data.get("channels"):
        warnings.append(f"No 'channels:' in {path.name}; micromamba defaults will apply")
    return warnings


def get_environment_name(data: Dict[str, Any]) -> Optional[str]:
    name = data.get("name")
    return str(name).strip() if name else None


def get_python_pin(data: Dict[str, Any]) -> Optional[str]:
    """Version from a `python=3.11` style dependency, or None."""
    for dep in data.get("dependencies") or []:
        if not isinstance(dep, str):
            continue
        match = _PYTHON_PIN_RE.match(dep.strip())
        if match:
            return match.group(1).rstrip(".*")
    return None


def is_lock_file_stale(project_dir: Path) -> bool:
    """True if environment.yml was modified after conda-lock.yml."""
    env_file = Path(project_dir) / ENVIRONMENT_FILE
    lock_file = Path(project_dir) / LOCK_FILE
    if not (env_file.is_file() and lock_file.is_file()):
        return False
    return env_file.stat().st_mtime > lock_file.stat().st_mtime


def sanitize_env_name(raw: str) -> str:
    """
    Turn an arbitrary string (usually a directory name) into an env name.

    "My Project!" -> "my-project", "2024-data" -> "env-2024-data"
    """
    name = re.sub(r"[^a-z0-9_-]+", "-", raw.lower()).strip("-")
    if not re.match(r"^[a-z_]", name):
        name = f"env-{name}" if name else "env"
    return name[:MAX_ENV_NAME_LENGTH]


def is_reserved_env_name(name: str) -> bool:
    return name in RESERVED_ENV_NAMES


def validate_env_name(name: str) -> str:
    if not name:
        raise ConfigError("Environment name cannot be empty")
    if is_reserved_env_name(name):
        raise ConfigError(
            f"Environment name '{name}' is reserved. "
            f"Reserved names: {', '.join(RESERVED_ENV_NAMES)}"
        )
    if len(name) > MAX_ENV_NAME_LENGTH:
        raise ConfigError(f"Environment name too long (max {MAX_ENV_NAME_LENGTH} characters): {name}")
    if not _ENV_NAME_RE.match(name):
        raise ConfigError(
            f"Invalid environment name: {name}. "
            "Use only alphanumeric characters, hyphens, and underscores"
        )
    return name


def resolve_env_name(
    project_dir: Path,
    explicit: Optional[str] = None,
    cfg: Optional[ProjectConfig] = None,
    env_file: Optional[Path] = None,
) -> str:
    """
    Pick the environment name: --env-name, project config, the `name:`
    field of environment.yml, then the sanitized directory name.
    """
    if explicit:
        return validate_env_name(explicit)
    if cfg is not None and cfg.env_name:
        return validate_env_name(cfg.env_name)

    if env_file is not None and env_file.name == ENVIRONMENT_FILE:
        from_file = get_environment_name(load_environment_file(env_file))
        if from_file:
            return validate_env_name(sanitize_env_name(from_file))

    return validate_env_name(sanitize_env_name(Path(project_dir).resolve().name))


def create_micromamba_env(
    micromamba: Union[str, Path],
    prefix: Path,
    env_file: Path,
    log: Callable[[str], None] = print,
) -> Path:
    """
    Create a micromamba environment at prefix from env_file.

    Raises:
        CommandFailed: If micromamba exits non-zero.
    """
    log(f"Creating micromamba environment at {prefix} from {env_file.name} ...")
    prefix.parent.mkdir(parents=True, exist_ok=True)
    run_command(
        [micromamba, "create", "-p", prefix, "-f", env_file, "-y"],
        cwd=env_file.parent,
    )
    return prefix


def verify_micromamba_env(prefix: Path) -> bool:
    """A prefix is a usable conda environment if it has conda-meta/."""
    return (Path(prefix) / "conda-meta").is_dir()
