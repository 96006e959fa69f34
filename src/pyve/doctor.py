"""`pyve doctor` - human-readable diagnostics for the current project."""

from pathlib import Path
from typing import Callable, Optional

from .config import Backend, Settings, load_project_config, load_settings
from .detection import (
    detect_backend_from_files,
    detect_version_manager,
    find_direnv,
    read_python_version_file,
)
from .environment import (
    get_env_path,
    get_python_executable,
    get_testenv_path,
    get_venv_python_version,
    verify_micromamba_env,
)
from .packages.micromamba import get_micromamba_version, locate_micromamba
from .process import run_command

from . import __version__


def _env_python_version(python: Path) -> Optional[str]:
    result = run_command(
        [python, "-c", "import sys; print('.'.join(map(str, sys.version_info[:3])))"],
        check=False,
    )
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def run_doctor(
    project_dir: Path,
    settings: Optional[Settings] = None,
    log: Callable[[str], None] = print,
) -> int:
    """
    Print diagnostics for project_dir.

    Returns:
        0, or 1 if the configured environment is missing.
    """
    project_dir = Path(project_dir).resolve()
    settings = settings or load_settings()
    cfg = load_project_config(project_dir)

    log("Pyve Environment Diagnostics")
    log("=" * 30)
    log(f"pyve: {__version__}")

    pinned = read_python_version_file(project_dir)
    log(f"Python version (.python-version): {pinned or 'not set'}")

    manager = detect_version_manager()
    log(f"Version manager: {f'{manager.name} ({manager.path})' if manager else 'not found'}")

    direnv = find_direnv()
    log(f"direnv: {direnv or 'not found'}")

    found = locate_micromamba(project_dir)
    if found:
        path, location = found
        version = get_micromamba_version(path) or "unknown version"
        log(f"micromamba: {path} ({location}, {version})")
    else:
        log("micromamba: not found")

    if cfg is None:
        log(f"Detected markers: {detect_backend_from_files(project_dir)}")
        log("Status: not initialized (run 'pyve --init')")
        return 0

    backend = cfg.backend
    log(f"Backend: {backend.value if backend else 'not configured'}")
    if cfg.pyve_version and cfg.pyve_version != __version__ and not settings.skip_version_check:
        log(f"  initialized with pyve {cfg.pyve_version}")

    env_path = get_env_path(project_dir, cfg)
    if env_path is None or not env_path.is_dir():
        log(f"Environment: {env_path or 'unknown'} (missing)")
        log("  Run 'pyve --init' to create it.")
        return 1

    log(f"Environment: {env_path}")
    if backend == Backend.MICROMAMBA:
        log(f"  name: {cfg.env_name}")
        if not verify_micromamba_env(env_path):
            log("  warning: no conda-meta directory")

    python = get_python_executable(env_path)
    if python.exists():
        version = get_venv_python_version(env_path) or _env_python_version(python)
        log(f"  Python: {version or 'unknown'} ({python})")
    else:
        log("  Python: not found in environment")

    testenv = get_testenv_path(project_dir)
    log(f"Test runner env: {testenv if testenv.is_dir() else 'not created'}")
    return 0
