"""
Detection layer - read-only inspection of the project and the host.

Backend markers, Python versions, and external tools.
"""

from .backend import (
    AMBIGUOUS,
    CONDA_MARKERS,
    ENVIRONMENT_FILE,
    LOCK_FILE,
    PIP_MARKERS,
    choose_backend,
    detect_backend_from_files,
    resolve_backend,
)
from .version import (
    compare_versions,
    major_minor,
    read_python_version_file,
    resolve_version,
    same_series,
    version_tuple,
    write_python_version_file,
)
from .tools import (
    VersionManager,
    detect_version_manager,
    find_direnv,
    find_executable,
)

__all__ = [
    # Backend
    "AMBIGUOUS",
    "CONDA_MARKERS",
    "ENVIRONMENT_FILE",
    "LOCK_FILE",
    "PIP_MARKERS",
    "choose_backend",
    "detect_backend_from_files",
    "resolve_backend",
    # Version
    "compare_versions",
    "major_minor",
    "read_python_version_file",
    "resolve_version",
    "same_series",
    "version_tuple",
    "write_python_version_file",
    # Tools
    "VersionManager",
    "detect_version_manager",
    "find_direnv",
    "find_executable",
]
