"""Configuration types for pyve."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

DEFAULT_PYTHON_VERSION = "3.13.7"
DEFAULT_VENV_DIR = ".venv"


class Backend(str, Enum):
    VENV = "venv"
    MICROMAMBA = "micromamba"

    def __str__(self) -> str:
        return self.value


# Accepted on the command line and in PYVE_BACKEND; means "detect".
AUTO_BACKEND = "auto"


@dataclass
class ProjectConfig:
    """Parsed .pyve/config.toml."""
    backend: Optional[Backend] = None
    pyve_version: Optional[str] = None
    python_version: Optional[str] = None
    venv_directory: str = DEFAULT_VENV_DIR
    env_name: Optional[str] = None
    direnv: bool = True
    dotenv_created: bool = False
    gitignore_created: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_legacy(self) -> bool:
        """Written before pyve recorded its own version."""
        return self.pyve_version is None


@dataclass
class Settings:
    """Behaviour switches read from PYVE_* environment variables."""
    backend: Optional[str] = None
    python_version: Optional[str] = None
    test_auto_install_pytest: bool = False
    force_yes: bool = False
    skip_version_check: bool = False
    disable_distutils_shim: bool = False
    debug: bool = False
    ci: bool = False
