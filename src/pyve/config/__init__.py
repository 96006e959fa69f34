"""Config layer - configuration parsing and types."""

from .types import (
    AUTO_BACKEND,
    DEFAULT_PYTHON_VERSION,
    DEFAULT_VENV_DIR,
    Backend,
    ProjectConfig,
    Settings,
)
from .parser import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DIRENV_FILE_NAME,
    ENV_FILE_NAME,
    GITIGNORE_FILE_NAME,
    PYTHON_VERSION_FILE,
    config_exists,
    get_config_path,
    load_project_config,
    parse_backend,
    parse_config,
    is_python_version,
    validate_python_version,
    validate_venv_dir_name,
    write_project_config,
)
from .settings import ENV_VARS, load_settings

__all__ = [
    "AUTO_BACKEND",
    "DEFAULT_PYTHON_VERSION",
    "DEFAULT_VENV_DIR",
    "Backend",
    "ProjectConfig",
    "Settings",
    "CONFIG_DIR_NAME",
    "CONFIG_FILE_NAME",
    "DIRENV_FILE_NAME",
    "ENV_FILE_NAME",
    "GITIGNORE_FILE_NAME",
    "PYTHON_VERSION_FILE",
    "config_exists",
    "get_config_path",
    "load_project_config",
    "parse_backend",
    "parse_config",
    "is_python_version",
    "validate_python_version",
    "validate_venv_dir_name",
    "write_project_config",
    "ENV_VARS",
    "load_settings",
]
