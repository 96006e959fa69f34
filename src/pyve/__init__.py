"""
pyve - per-project Python environments.

Features:
- Python version pinning through asdf / pyenv and .python-version
- venv or micromamba environments, detected from project files
- direnv activation, dotenv and .gitignore management
- Consistency validation, diagnostics, and running commands or tests in the environment
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("pyve")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"


# =============================================================================
# Primary API
# =============================================================================

from .lifecycle import InitOptions, InitResult, initialize, purge, set_python_version
from .validate import run_validation
from .doctor import run_doctor
from .runner import run_in_env, run_tests


# =============================================================================
# Config Layer
# =============================================================================

from .config import (
    Backend,
    ProjectConfig,
    Settings,
    load_project_config,
    load_settings,
    write_project_config,
    DEFAULT_PYTHON_VERSION,
)


# =============================================================================
# Detection Layer
# =============================================================================

from .detection import (
    detect_backend_from_files,
    resolve_backend,
    resolve_version,
)


# =============================================================================
# Errors
# =============================================================================

from .errors import CommandFailed, ConfigError, NotInitializedError, PyveError


__all__ = [
    "__version__",
    # Primary API
    "InitOptions",
    "InitResult",
    "initialize",
    "purge",
    "set_python_version",
    "run_validation",
    "run_doctor",
    "run_in_env",
    "run_tests",
    # Config
    "Backend",
    "ProjectConfig",
    "Settings",
    "load_project_config",
    "load_settings",
    "write_project_config",
    "DEFAULT_PYTHON_VERSION",
    # Detection
    "detect_backend_from_files",
    "resolve_backend",
    "resolve_version",
    # Errors
    "CommandFailed",
    "ConfigError",
    "NotInitializedError",
    "PyveError",
]
