"""
Running commands inside the project environment (`pyve run`) and running
pytest from the dedicated test-runner environment (`pyve test`).
"""

import os
import shutil
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .config import Backend, Settings, load_project_config, load_settings
from .environment import (
    create_venv,
    get_bin_dir,
    get_env_path,
    get_python_executable,
    get_testenv_path,
    pip_install,
)
from .errors import NotInitializedError, PyveError
from .process import prepend_path, run_command, run_passthrough
from .prompt import Ask, confirm, is_interactive


COMMAND_NOT_FOUND = 127


def activated_environ(
    env_path: Path,
    backend: Backend,
    base: Optional[Dict[str, str]] = None,
) -> Dict[str, str]:
    """Copy of base (default os.environ) with env_path activated."""
    env = prepend_path(dict(os.environ if base is None else base), get_bin_dir(env_path))
    env.pop("PYTHONHOME", None)
    if backend == Backend.MICROMAMBA:
        env["CONDA_PREFIX"] = str(env_path)
    else:
        env["VIRTUAL_ENV"] = str(env_path)
    return env


def _project_environ(project_dir: Path, required: bool) -> Optional[Dict[str, str]]:
    cfg = load_project_config(project_dir)
    if cfg is None:
        if required:
            raise NotInitializedError(project_dir)
        return None
    env_path = get_env_path(project_dir, cfg)
    if env_path is None or not env_path.is_dir():
        if required:
            raise PyveError(f"Environment not found at {env_path}. Run 'pyve --init' to create it.")
        return None
    return activated_environ(env_path, cfg.backend or Backend.VENV)


def run_in_env(project_dir: Path, command: List[str]) -> int:
    """
    Run command with the project environment activated.

    Returns:
        The command's exit code, or 127 if it cannot be found.

    Raises:
        NotInitializedError: If the project has no pyve config.
        PyveError: If no command is given or the environment is missing.
    """
    project_dir = Path(project_dir).resolve()
    if not command:
        raise PyveError("No command given. Usage: pyve run <command> [args...]")

    env = _project_environ(project_dir, required=True)
    executable = shutil.which(command[0], path=env["PATH"])
    if executable is None:
        print(f"Error: command not found: {command[0]}", file=sys.stderr)
        return COMMAND_NOT_FOUND
    return run_passthrough([executable, *command[1:]], cwd=project_dir, env=env)


def _has_pytest(python: Path) -> bool:
    return run_command([python, "-c", "import pytest"], check=False).returncode == 0


def ensure_testenv(
    project_dir: Path,
    settings: Optional[Settings] = None,
    ask: Ask = input,
    interactive: Optional[bool] = None,
    log: Callable[[str], None] = print,
) -> Path:
    """
    Create .pyve/testenv/venv if needed and make sure pytest is installed.

    Returns:
        Path to the test-runner python.
    """
    settings = settings or load_settings()
    if interactive is None:
        interactive = is_interactive()

    testenv = get_testenv_path(project_dir)
    python = get_python_executable(testenv)
    if not python.exists():
        log("Creating test runner environment ...")
        create_venv(sys.executable, testenv, log=log)

    if not _has_pytest(python):
        auto = settings.test_auto_install_pytest or settings.ci
        if not auto:
            if not interactive:
                raise PyveError(
                    "pytest is not installed in the test runner environment. "
                    "Set PYVE_TEST_AUTO_INSTALL_PYTEST=1 to install it automatically."
                )
            if not confirm("pytest is not installed in the test runner environment. Install it now?",
                           default=True, ask=ask):
                raise PyveError("pytest is required to run tests.")
        pip_install(python, ["pytest"], log=log)
    return python


def run_tests(
    project_dir: Path,
    args: List[str],
    settings: Optional[Settings] = None,
    ask: Ask = input,
    interactive: Optional[bool] = None,
    log: Callable[[str], None] = print,
) -> int:
    """Run pytest with args from the test-runner env and return its exit code."""
    project_dir = Path(project_dir).resolve()
    python = ensure_testenv(project_dir, settings, ask=ask, interactive=interactive, log=log)
    env = _project_environ(project_dir, required=False)
    return run_passthrough([python, "-m", "pytest", *args], cwd=project_dir, env=env)
