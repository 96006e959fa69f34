"""Python version resolution and comparison."""

import logging
import re
from pathlib import Path
from typing import Optional, Tuple

from ..config.parser import PYTHON_VERSION_FILE, validate_python_version
from ..config.types import DEFAULT_PYTHON_VERSION, ProjectConfig, Settings

logger = logging.getLogger("pyve")


def read_python_version_file(project_dir: Path) -> Optional[str]:
    """Return the first non-blank, non-comment line of .python-version."""
    path = Path(project_dir) / PYTHON_VERSION_FILE
    if not path.is_file():
        return None
    for line in path.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            return line
    return None


def write_python_version_file(project_dir: Path, version: str) -> Path:
    path = Path(project_dir) / PYTHON_VERSION_FILE
    path.write_text(f"{version}\n")
    return path


def resolve_version(
    project_dir: Path,
    explicit: Optional[str] = None,
    settings: Optional[Settings] = None,
    config: Optional[ProjectConfig] = None,
) -> str:
    """
    Resolve the Python version for project_dir.

    Priority: explicit argument, .python-version, project config,
    PYVE_PYTHON_VERSION, built-in default.

    Raises:
        ConfigError: If the winning value is not a valid version.
    """
    candidates = (
        ("argument", explicit),
        (PYTHON_VERSION_FILE, read_python_version_file(project_dir)),
        ("config", config.python_version if config else None),
        ("PYVE_PYTHON_VERSION", settings.python_version if settings else None),
        ("default", DEFAULT_PYTHON_VERSION),
    )
    for source, value in candidates:
        if value:
            logger.debug("python version %s from %s", value, source)
            return validate_python_version(value)
    return DEFAULT_PYTHON_VERSION


def version_tuple(version: str) -> Tuple[int, ...]:
    """Leading numeric components: "3.11.5" -> (3, 11, 5), "0.9.0-dev" -> (0, 9, 0)."""
    parts = []
    for piece in version.strip().lstrip("v").split("."):
        match = re.match(r"\d+", piece)
        if not match:
            break
        parts.append(int(match.group()))
    return tuple(parts)


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1 as a is older than, equal to or newer than b."""
    ta, tb = version_tuple(a), version_tuple(b)
    width = max(len(ta), len(tb))
    ta += (0,) * (width - len(ta))
    tb += (0,) * (width - len(tb))
    return (ta > tb) - (ta < tb)


def major_minor(version: str) -> str:
    return ".".join(str(p) for p in version_tuple(version)[:2])


def same_series(a: str, b: str) -> bool:
    """True if both versions share MAJOR.MINOR."""
    return version_tuple(a)[:2] == version_tuple(b)[:2]
