"""
Environment layer - everything pyve creates or removes on disk.

Environment paths, the venv and micromamba backends, direnv and dotenv
files, the managed .gitignore block, interpreters and the distutils shim.
"""

from .paths import (
    get_bin_dir,
    get_env_path,
    get_micromamba_prefix,
    get_pyve_dir,
    get_python_executable,
    get_testenv_dir,
    get_testenv_path,
    get_venv_path,
)
from .venv import (
    create_venv,
    get_venv_python_version,
    is_venv,
    pip_install,
)
from .micromamba import (
    RESERVED_ENV_NAMES,
    create_micromamba_env,
    detect_environment_file,
    get_python_pin,
    is_lock_file_stale,
    load_environment_file,
    resolve_env_name,
    sanitize_env_name,
    validate_env_name,
    validate_environment_file,
    verify_micromamba_env,
)
from .direnv import (
    ENVRC_MARKER,
    is_pyve_envrc,
    remove_dotenv,
    remove_envrc,
    write_dotenv,
    write_envrc,
)
from .gitignore import (
    BLOCK_END,
    BLOCK_START,
    get_gitignore_path,
    gitignore_patterns,
    has_pyve_block,
    remove_gitignore_block,
    update_gitignore,
)
from .version_manager import (
    find_python,
    get_interpreter,
    install_version,
    is_version_available,
    is_version_installed,
)
from .shim import install_distutils_shim

__all__ = [
    # Paths
    "get_bin_dir",
    "get_env_path",
    "get_micromamba_prefix",
    "get_pyve_dir",
    "get_python_executable",
    "get_testenv_dir",
    "get_testenv_path",
    "get_venv_path",
    # venv
    "create_venv",
    "get_venv_python_version",
    "is_venv",
    "pip_install",
    # micromamba
    "RESERVED_ENV_NAMES",
    "create_micromamba_env",
    "detect_environment_file",
    "get_python_pin",
    "is_lock_file_stale",
    "load_environment_file",
    "resolve_env_name",
    "sanitize_env_name",
    "validate_env_name",
    "validate_environment_file",
    "verify_micromamba_env",
    # direnv / dotenv
    "ENVRC_MARKER",
    "is_pyve_envrc",
    "remove_dotenv",
    "remove_envrc",
    "write_dotenv",
    "write_envrc",
    # .gitignore
    "BLOCK_END",
    "BLOCK_START",
    "get_gitignore_path",
    "gitignore_patterns",
    "has_pyve_block",
    "remove_gitignore_block",
    "update_gitignore",
    # Interpreters
    "find_python",
    "get_interpreter",
    "install_version",
    "is_version_available",
    "is_version_installed",
    # distutils shim
    "install_distutils_shim",
]
