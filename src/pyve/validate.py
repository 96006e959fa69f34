"""
`pyve --validate` - check that config, environment, .python-version and
backend markers agree with each other.

Exit codes: 0 all consistent, 1 errors, 2 warnings only.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from .config import (
    PYTHON_VERSION_FILE,
    Backend,
    ProjectConfig,
    Settings,
    config_exists,
    load_project_config,
    load_settings,
    validate_python_version,
)
from .detection import (
    AMBIGUOUS,
    ENVIRONMENT_FILE,
    compare_versions,
    detect_backend_from_files,
    find_direnv,
    read_python_version_file,
    same_series,
)
from .detection.backend import NONE
from .environment import (
    detect_environment_file,
    get_micromamba_prefix,
    get_python_pin,
    get_python_executable,
    get_venv_path,
    get_venv_python_version,
    is_lock_file_stale,
    load_environment_file,
    verify_micromamba_env,
)
from .environment.direnv import get_dotenv_path, get_envrc_path
from .errors import ConfigError

from . import __version__

OK = "ok"
INFO = "info"
WARNING = "warning"
ERROR = "error"

SYMBOLS = {OK: "✓", INFO: "-", WARNING: "⚠", ERROR: "✗"}

EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_WARNINGS = 2


@dataclass
class Check:
    level: str
    label: str
    message: str
    hint: Optional[str] = None

    def render(self) -> str:
        line = f"{SYMBOLS[self.level]} {self.label}: {self.message}"
        if self.hint:
            line += f"\n  {self.hint}"
        return line


def exit_code(checks: List[Check]) -> int:
    levels = {c.level for c in checks}
    if ERROR in levels:
        return EXIT_ERRORS
    if WARNING in levels:
        return EXIT_WARNINGS
    return EXIT_OK


def _check_pyve_version(cfg: ProjectConfig, settings: Settings) -> Check:
    if cfg.is_legacy:
        return Check(WARNING, "Pyve version", "not recorded (legacy project)",
                     "Run 'pyve --init --update' to add version tracking.")
    cmp = compare_versions(cfg.pyve_version, __version__)
    if cmp == 0 or settings.skip_version_check:
        return Check(OK, "Pyve version", f"{cfg.pyve_version}")
    if cmp < 0:
        return Check(WARNING, "Pyve version", f"{cfg.pyve_version} (current: {__version__})",
                     "Migration recommended. Run 'pyve --init --update' to update.")
    return Check(WARNING, "Pyve version", f"{cfg.pyve_version} (current: {__version__})",
                 "Project uses a newer pyve. Consider upgrading.")


def _check_python_version_file(project_dir: Path) -> tuple:
    """Returns (check, version or None)."""
    raw = read_python_version_file(project_dir)
    if raw is None:
        return Check(ERROR, "Python version", f"{PYTHON_VERSION_FILE} missing",
                     "Run 'pyve --python-version <VER>' to pin one."), None
    try:
        version = validate_python_version(raw)
    except ConfigError as e:
        return Check(ERROR, "Python version", str(e)), None
    return Check(OK, "Python version", f"{version} ({PYTHON_VERSION_FILE})"), version


def _venv_checks(project_dir: Path, cfg: ProjectConfig) -> List[Check]:
    checks = []
    env_path = get_venv_path(project_dir, cfg.venv_directory)
    if not env_path.is_dir():
        checks.append(Check(ERROR, "Virtual environment", f"{cfg.venv_directory} (missing)",
                            "Run 'pyve --init' to create."))
    elif not get_python_executable(env_path).exists():
        checks.append(Check(ERROR, "Virtual environment", f"{cfg.venv_directory} (no Python executable)"))
    else:
        checks.append(Check(OK, "Virtual environment", f"{cfg.venv_directory} (exists)"))

    version_check, pinned = _check_python_version_file(project_dir)
    checks.append(version_check)

    if env_path.is_dir() and pinned:
        actual = get_venv_python_version(env_path)
        if actual is None:
            checks.append(Check(WARNING, "Environment Python", "could not determine (no pyvenv.cfg)"))
        elif same_series(actual, pinned):
            checks.append(Check(OK, "Environment Python", f"{actual} matches {pinned}"))
        else:
            checks.append(Check(ERROR, "Environment Python", f"{actual} does not match {PYTHON_VERSION_FILE} ({pinned})",
                                "Run 'pyve --init --force' to rebuild the environment."))
    return checks


def _micromamba_checks(project_dir: Path, cfg: ProjectConfig) -> List[Check]:
    checks = []
    env_file = detect_environment_file(project_dir)
    if env_file is None:
        checks.append(Check(ERROR, "Environment file", "environment.yml / conda-lock.yml (missing)"))
    else:
        checks.append(Check(OK, "Environment file", f"{env_file.name} (exists)"))

    if not cfg.env_name:
        checks.append(Check(ERROR, "Environment name", "not configured"))
    else:
        checks.append(Check(OK, "Environment name", cfg.env_name))
        prefix = get_micromamba_prefix(project_dir, cfg.env_name)
        if not prefix.is_dir():
            checks.append(Check(ERROR, "Environment", f"{prefix.relative_to(project_dir)} (missing)",
                                "Run 'pyve --init' to create."))
        elif not verify_micromamba_env(prefix):
            checks.append(Check(ERROR, "Environment", f"{prefix.relative_to(project_dir)} (no conda-meta)"))
        else:
            checks.append(Check(OK, "Environment", f"{prefix.relative_to(project_dir)} (exists)"))

    pinned = read_python_version_file(project_dir)
    if pinned and env_file is not None and env_file.name == ENVIRONMENT_FILE:
        try:
            pin = get_python_pin(load_environment_file(env_file))
        except ConfigError as e:
            checks.append(Check(ERROR, "Environment file", str(e)))
            pin = None
        if pin and not same_series(pin, pinned):
            checks.append(Check(ERROR, "Python version",
                                f"{PYTHON_VERSION_FILE} ({pinned}) disagrees with environment.yml (python={pin})"))
        elif pin:
            checks.append(Check(OK, "Python version", f"{pinned} matches python={pin}"))

    if is_lock_file_stale(project_dir):
        checks.append(Check(WARNING, "Lock file", "conda-lock.yml is older than environment.yml",
                            "Regenerate with: conda-lock -f environment.yml"))
    return checks


def _marker_check(project_dir: Path, backend: Backend) -> Check:
    detected = detect_backend_from_files(project_dir)
    if detected == NONE:
        return Check(OK, "Backend markers", "none")
    if detected == AMBIGUOUS:
        return Check(OK, "Backend markers", "conda and pip files (ambiguous)")
    if detected != backend.value:
        return Check(ERROR, "Backend markers", f"files suggest {detected}, config says {backend.value}")
    return Check(OK, "Backend markers", f"consistent with {backend.value}")


def collect_checks(project_dir: Path, settings: Optional[Settings] = None) -> List[Check]:
    """Run every consistency check for project_dir."""
    project_dir = Path(project_dir).resolve()
    settings = settings or load_settings()

    if not config_exists(project_dir):
        return [Check(ERROR, "Configuration", "missing (.pyve/config.toml)", "Run 'pyve --init' first.")]
    try:
        cfg = load_project_config(project_dir)
    except ConfigError as e:
        return [Check(ERROR, "Configuration", str(e))]

    checks = [Check(OK, "Configuration", "valid"), _check_pyve_version(cfg, settings)]

    if cfg.backend is None:
        checks.append(Check(ERROR, "Backend", "not configured"))
        return checks
    checks.append(Check(OK, "Backend", cfg.backend.value))

    if cfg.backend == Backend.MICROMAMBA:
        checks += _micromamba_checks(project_dir, cfg)
    else:
        checks += _venv_checks(project_dir, cfg)

    checks.append(_marker_check(project_dir, cfg.backend))

    if cfg.direnv:
        if get_envrc_path(project_dir).is_file():
            checks.append(Check(OK, "direnv", ".envrc (exists)"))
        else:
            checks.append(Check(WARNING, "direnv", ".envrc (missing)"))
        if find_direnv() is None:
            checks.append(Check(INFO, "direnv", "not installed"))
    if not get_dotenv_path(project_dir).exists():
        checks.append(Check(WARNING, "Dotenv", ".env (missing)"))

    return checks


def run_validation(
    project_dir: Path,
    settings: Optional[Settings] = None,
    log: Callable[[str], None] = print,
) -> int:
    """Print the validation report and return its exit code."""
    checks = collect_checks(project_dir, settings)
    log("Pyve Installation Validation")
    log("=" * 30)
    for check in checks:
        log(check.render())
    code = exit_code(checks)
    log("")
    if code == EXIT_OK:
        log("All checks passed.")
    elif code == EXIT_WARNINGS:
        log("Validation completed with warnings.")
    else:
        log("Validation failed.")
    return code
