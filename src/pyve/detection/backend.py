"""
Backend detection - pick venv or micromamba for a project directory.

choose_backend() is pure; detect_backend_from_files() only looks at which
marker files exist.
"""

import logging
from pathlib import Path
from typing import Optional

from ..config.parser import parse_backend
from ..config.types import Backend, ProjectConfig, Settings

logger = logging.getLogger("pyve")

ENVIRONMENT_FILE = "environment.yml"
LOCK_FILE = "conda-lock.yml"
CONDA_MARKERS = (ENVIRONMENT_FILE, LOCK_FILE)
PIP_MARKERS = ("requirements.txt", "pyproject.toml")

# detect_backend_from_files() results besides the Backend values
AMBIGUOUS = "ambiguous"
NONE = "none"


def detect_backend_from_files(project_dir: Path) -> str:
    """
    Classify a directory by its package marker files.

    Returns:
        "micromamba", "venv", "ambiguous" (both kinds present) or "none".
    """
    project_dir = Path(project_dir)
    has_conda = any((project_dir / name).is_file() for name in CONDA_MARKERS)
    has_pip = any((project_dir / name).is_file() for name in PIP_MARKERS)

    if has_conda and has_pip:
        return AMBIGUOUS
    if has_conda:
        return Backend.MICROMAMBA.value
    if has_pip:
        return Backend.VENV.value
    return NONE


def choose_backend(
    detected: str,
    explicit: Optional[str] = None,
    env_backend: Optional[str] = None,
    config_backend: Optional[Backend] = None,
) -> Backend:
    """
    Pick a backend by priority: CLI flag, PYVE_BACKEND, project config,
    marker files, then venv. "auto" in the first two means "keep looking".
    """
    for value in (explicit, env_backend):
        if value:
            backend = parse_backend(value)
            if backend is not None:
                return backend

    if config_backend is not None:
        return config_backend

    if detected == Backend.MICROMAMBA.value:
        return Backend.MICROMAMBA
    if detected == AMBIGUOUS:
        logger.warning(
            "Both conda and Python package files detected; defaulting to venv. "
            "Use --backend venv or --backend micromamba to choose explicitly."
        )
    return Backend.VENV


def resolve_backend(
    project_dir: Path,
    explicit: Optional[str] = None,
    settings: Optional[Settings] = None,
    config: Optional[ProjectConfig] = None,
) -> Backend:
    """Resolve the backend for project_dir."""
    detected = detect_backend_from_files(project_dir)
    backend = choose_backend(
        detected,
        explicit=explicit,
        env_backend=settings.backend if settings else None,
        config_backend=config.backend if config else None,
    )
    logger.debug("backend: %s (markers: %s)", backend.value, detected)
    return backend
