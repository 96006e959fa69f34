"""Environment-variable settings."""

import os
from typing import Mapping, Optional

from .types import Settings

BACKEND_VAR = "PYVE_BACKEND"
PYTHON_VERSION_VAR = "PYVE_PYTHON_VERSION"
TEST_AUTO_INSTALL_PYTEST_VAR = "PYVE_TEST_AUTO_INSTALL_PYTEST"
FORCE_YES_VAR = "PYVE_FORCE_YES"
SKIP_VERSION_CHECK_VAR = "PYVE_SKIP_VERSION_CHECK"
DISABLE_DISTUTILS_SHIM_VAR = "PYVE_DISABLE_DISTUTILS_SHIM"
DEBUG_VAR = "PYVE_DEBUG"

ENV_VARS = (
    BACKEND_VAR,
    PYTHON_VERSION_VAR,
    TEST_AUTO_INSTALL_PYTEST_VAR,
    FORCE_YES_VAR,
    SKIP_VERSION_CHECK_VAR,
    DISABLE_DISTUTILS_SHIM_VAR,
    DEBUG_VAR,
)


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read PYVE_* variables (and CI) from environ, defaulting to os.environ."""
    env = os.environ if environ is None else environ
    return Settings(
        backend=env.get(BACKEND_VAR) or None,
        python_version=env.get(PYTHON_VERSION_VAR) or None,
        test_auto_install_pytest=_flag(env.get(TEST_AUTO_INSTALL_PYTEST_VAR)),
        force_yes=_flag(env.get(FORCE_YES_VAR)),
        skip_version_check=_flag(env.get(SKIP_VERSION_CHECK_VAR)),
        disable_distutils_shim=_flag(env.get(DISABLE_DISTUTILS_SHIM_VAR)),
        debug=_flag(env.get(DEBUG_VAR)),
        ci=_flag(env.get("CI")),
    )
