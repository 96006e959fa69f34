"""
Project lifecycle: initialize, re-initialize, purge, and pin the Python version.

    uninitialized --init--> initialized --purge--> uninitialized

Purge leaves .python-version in place.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .config import (
    DEFAULT_VENV_DIR,
    Backend,
    ProjectConfig,
    Settings,
    config_exists,
    load_project_config,
    load_settings,
    parse_backend,
    validate_python_version,
    validate_venv_dir_name,
    write_project_config,
)
from .detection import (
    ENVIRONMENT_FILE,
    LOCK_FILE,
    detect_version_manager,
    find_direnv,
    read_python_version_file,
    resolve_backend,
    resolve_version,
    write_python_version_file,
)
from .detection.tools import VersionManager
from .environment import (
    create_micromamba_env,
    create_venv,
    detect_environment_file,
    find_python,
    get_interpreter,
    get_micromamba_prefix,
    get_gitignore_path,
    get_pyve_dir,
    get_python_executable,
    get_testenv_dir,
    get_venv_path,
    gitignore_patterns,
    install_distutils_shim,
    install_version,
    is_lock_file_stale,
    is_venv,
    remove_dotenv,
    remove_envrc,
    remove_gitignore_block,
    resolve_env_name,
    update_gitignore,
    validate_environment_file,
    verify_micromamba_env,
    write_dotenv,
    write_envrc,
)
from .errors import ConfigError, PyveError
from .packages.micromamba import (
    PROJECT,
    USER,
    bootstrap_micromamba,
    get_micromamba_path,
    micromamba_install_hint,
)
from .prompt import Ask, choose, confirm, is_interactive

from . import __version__

logger = logging.getLogger("pyve")

UPDATE = "update"
FORCE = "force"
CANCEL = "cancel"


@dataclass
class InitOptions:
    """Options for `pyve --init`."""
    venv_dir: Optional[str] = None
    python_version: Optional[str] = None
    backend: Optional[str] = None
    env_name: Optional[str] = None
    force: bool = False
    update: bool = False
    yes: bool = False
    direnv: bool = True
    strict: bool = False
    auto_bootstrap: bool = False
    bootstrap_to: str = USER


@dataclass
class InitResult:
    backend: Backend
    env_path: Path
    python_version: Optional[str]
    created: bool
    updated: bool = False


def _rmtree(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    else:
        shutil.rmtree(path)


# =============================================================================
# Interpreters
# =============================================================================

def ensure_python(
    version: str,
    manager: Optional[VersionManager] = None,
    assume_yes: bool = False,
    interactive: bool = False,
    ask: Ask = input,
    log: Callable[[str], None] = print,
) -> Path:
    """
    Return an interpreter for version, installing it through the version
    manager when nothing suitable is found.

    Raises:
        PyveError: If no interpreter can be found or installed.
    """
    python = find_python(version, manager)
    if python is not None:
        return python

    if manager is None:
        raise PyveError(
            f"Python {version} not found and no version manager is available. "
            "Install asdf (https://asdf-vm.com/) or pyenv (https://github.com/pyenv/pyenv)."
        )

    if interactive and not assume_yes:
        if not confirm(f"Python {version} is not installed. Install it with {manager.name}?", default=True, ask=ask):
            raise PyveError(f"Python {version} is required but not installed.")

    install_version(manager, version, log=log)
    python = get_interpreter(manager, version)
    if python is None:
        raise PyveError(f"Installed Python {version} with {manager.name} but could not locate the interpreter.")
    return python


def set_python_version(
    project_dir: Path,
    version: str,
    settings: Optional[Settings] = None,
    ask: Ask = input,
    interactive: Optional[bool] = None,
    log: Callable[[str], None] = print,
) -> str:
    """
    Validate version, make sure it is installed, and write .python-version.

    No environment is created, modified or removed.
    """
    settings = settings or load_settings()
    version = validate_python_version(version)
    if interactive is None:
        interactive = is_interactive()

    ensure_python(
        version,
        detect_version_manager(),
        assume_yes=settings.force_yes,
        interactive=interactive,
        ask=ask,
        log=log,
    )
    write_python_version_file(project_dir, version)
    log(f"Set Python version to {version} in .python-version")
    return version


# =============================================================================
# Initialize
# =============================================================================

def _reinit_action(
    options: InitOptions,
    interactive: bool,
    ask: Ask,
    log: Callable[[str], None],
) -> str:
    if options.update:
        return UPDATE
    if options.force:
        return FORCE
    if not interactive:
        raise PyveError(
            "Project is already initialized. Use --init --update to refresh the "
            "configuration or --init --force to purge and re-initialize."
        )
    log("Project is already initialized with pyve.")
    choice = choose(
        "What would you like to do?",
        ["Update in-place (preserve environment)", "Purge and re-initialize", "Cancel"],
        default=3,
        ask=ask,
    )
    return {1: UPDATE, 2: FORCE}.get(choice, CANCEL)


def _update_in_place(
    project_dir: Path,
    existing: ProjectConfig,
    options: InitOptions,
    log: Callable[[str], None],
) -> InitResult:
    requested = parse_backend(options.backend) if options.backend else None
    if requested is not None and existing.backend is not None and requested != existing.backend:
        raise PyveError(
            "Cannot update in-place: Backend change detected "
            f"({existing.backend.value} -> {requested.value}). "
            "Use --init --force to purge and re-initialize."
        )

    if existing.is_legacy:
        log("Upgrading legacy configuration (no recorded pyve version)")
    elif existing.pyve_version != __version__:
        log(f"Updating recorded pyve version {existing.pyve_version} -> {__version__}")
    existing.pyve_version = __version__
    if existing.backend is None:
        existing.backend = resolve_backend(project_dir, config=existing)
    write_project_config(project_dir, existing)

    if existing.backend == Backend.MICROMAMBA:
        env_path = get_micromamba_prefix(project_dir, existing.env_name or "")
    else:
        env_path = get_venv_path(project_dir, existing.venv_directory)
    log("Configuration updated. Environment left untouched.")
    return InitResult(existing.backend, env_path, existing.python_version, created=False, updated=True)


def _check_lock_file(
    project_dir: Path,
    strict: bool,
    interactive: bool,
    assume_yes: bool,
    ask: Ask,
    log: Callable[[str], None],
) -> None:
    has_env = (project_dir / ENVIRONMENT_FILE).is_file()
    has_lock = (project_dir / LOCK_FILE).is_file()

    if has_env and has_lock and is_lock_file_stale(project_dir):
        if strict:
            raise ConfigError(
                f"Lock file is stale (strict mode): {ENVIRONMENT_FILE} was modified after {LOCK_FILE}. "
                f"Regenerate it with: conda-lock -f {ENVIRONMENT_FILE}"
            )
        log(f"Warning: {LOCK_FILE} may be stale ({ENVIRONMENT_FILE} is newer)")
        if interactive and not assume_yes and not confirm("Continue anyway?", ask=ask):
            raise PyveError(f"Aborted. Regenerate {LOCK_FILE} and try again.")
    elif has_env and not has_lock:
        if strict:
            raise ConfigError(
                f"Lock file missing (strict mode). Generate one with: conda-lock -f {ENVIRONMENT_FILE}"
            )
        if interactive and not assume_yes:
            log(f"No {LOCK_FILE} found; builds will not be reproducible.")
            if not confirm("Continue anyway?", default=True, ask=ask):
                raise PyveError(f"Aborted. Generate {LOCK_FILE} and try again.")


def _ensure_micromamba(
    project_dir: Path,
    options: InitOptions,
    interactive: bool,
    ask: Ask,
    log: Callable[[str], None],
) -> Path:
    micromamba = get_micromamba_path(project_dir)
    if micromamba is not None:
        return micromamba

    if options.auto_bootstrap:
        return bootstrap_micromamba(project_dir, options.bootstrap_to, log=log)

    if interactive:
        log("micromamba not found.")
        choice = choose(
            "How would you like to install micromamba?",
            ["Download to project sandbox (.pyve/bin)", "Download to user sandbox (~/.pyve/bin)", "Abort"],
            default=2,
            ask=ask,
        )
        if choice in (1, 2):
            return bootstrap_micromamba(project_dir, PROJECT if choice == 1 else USER, log=log)

    raise PyveError(micromamba_install_hint())


def _init_venv(
    project_dir: Path,
    options: InitOptions,
    existing: Optional[ProjectConfig],
    settings: Settings,
    interactive: bool,
    ask: Ask,
    log: Callable[[str], None],
) -> ProjectConfig:
    venv_dir = validate_venv_dir_name(
        options.venv_dir or (existing.venv_directory if existing else DEFAULT_VENV_DIR)
    )
    version = resolve_version(project_dir, options.python_version, settings, existing)

    env_path = get_venv_path(project_dir, venv_dir)
    if env_path.exists():
        log(f"Virtual environment already exists at {venv_dir}; no change.")
    else:
        python = ensure_python(
            version,
            detect_version_manager(),
            assume_yes=options.yes or settings.force_yes,
            interactive=interactive,
            ask=ask,
            log=log,
        )
        create_venv(python, env_path, log=log)
        install_distutils_shim(
            get_python_executable(env_path),
            disabled=settings.disable_distutils_shim,
            log=log,
        )

    if options.python_version or read_python_version_file(project_dir) is None:
        write_python_version_file(project_dir, version)

    return ProjectConfig(
        backend=Backend.VENV,
        pyve_version=__version__,
        python_version=version,
        venv_directory=venv_dir,
        direnv=options.direnv,
        extra=existing.extra if existing else {},
    )


def _init_micromamba(
    project_dir: Path,
    options: InitOptions,
    existing: Optional[ProjectConfig],
    settings: Settings,
    interactive: bool,
    ask: Ask,
    log: Callable[[str], None],
) -> ProjectConfig:
    micromamba = _ensure_micromamba(project_dir, options, interactive, ask, log)

    env_file = detect_environment_file(project_dir)
    if env_file is None:
        raise ConfigError(
            f"No {ENVIRONMENT_FILE} or {LOCK_FILE} found in {project_dir}. "
            "The micromamba backend needs an environment file."
        )
    for warning in validate_environment_file(env_file):
        log(f"Warning: {warning}")
    _check_lock_file(project_dir, options.strict, interactive, options.yes or settings.force_yes, ask, log)

    env_name = resolve_env_name(project_dir, options.env_name, existing, env_file)
    prefix = get_micromamba_prefix(project_dir, env_name)
    if prefix.exists():
        log(f"Environment already exists at {prefix.relative_to(project_dir)}; no change.")
        if not verify_micromamba_env(prefix):
            log(f"Warning: {prefix} has no conda-meta directory; it may be incomplete")
    else:
        create_micromamba_env(micromamba, prefix, env_file, log=log)
        python = get_python_executable(prefix)
        if python.exists():
            install_distutils_shim(python, disabled=settings.disable_distutils_shim, log=log)

    return ProjectConfig(
        backend=Backend.MICROMAMBA,
        pyve_version=__version__,
        env_name=env_name,
        direnv=options.direnv,
        extra=existing.extra if existing else {},
    )


def initialize(
    project_dir: Path,
    options: Optional[InitOptions] = None,
    settings: Optional[Settings] = None,
    ask: Ask = input,
    interactive: Optional[bool] = None,
    log: Callable[[str], None] = print,
) -> Optional[InitResult]:
    """
    Initialize (or re-initialize) the pyve environment for project_dir.

    Args:
        project_dir: Project root.
        options: Command-line options.
        settings: PYVE_* settings (read from os.environ if omitted).
        ask: Input function for prompts.
        interactive: Whether prompts may be shown (defaults to stdin is a TTY).
        log: Logging callback.

    Returns:
        InitResult, or None if the user cancelled.

    Raises:
        PyveError: On invalid configuration or a failed external command.
    """
    project_dir = Path(project_dir).resolve()
    options = options or InitOptions()
    settings = settings or load_settings()
    if interactive is None:
        interactive = is_interactive()
    assume_yes = options.yes or settings.force_yes

    existing = None
    if config_exists(project_dir):
        try:
            existing = load_project_config(project_dir)
        except ConfigError:
            if not options.force:
                raise
            logger.warning("Ignoring unreadable config; --force re-initializes it")

        action = _reinit_action(options, interactive, ask, log)
        if action == CANCEL:
            log("Cancelled.")
            return None
        if action == UPDATE and existing is not None:
            return _update_in_place(project_dir, existing, options, log)
        if action == UPDATE:
            raise PyveError("Cannot update in-place: the existing configuration is unreadable. Use --force.")

        log("Re-initializing: the current environment will be purged.")
        if not assume_yes and not confirm("Continue?", ask=ask):
            log("Cancelled.")
            return None
        purge(project_dir, venv_dir=existing.venv_directory if existing else None,
              keep_testenv=True, yes=True, settings=settings, log=log)
        existing = ProjectConfig(extra=existing.extra) if existing else None

    backend = resolve_backend(project_dir, options.backend, settings, existing)
    log(f"Backend: {backend.value}")

    if backend == Backend.MICROMAMBA:
        cfg = _init_micromamba(project_dir, options, existing, settings, interactive, ask, log)
        env_path = get_micromamba_prefix(project_dir, cfg.env_name)
    else:
        cfg = _init_venv(project_dir, options, existing, settings, interactive, ask, log)
        env_path = get_venv_path(project_dir, cfg.venv_directory)

    gitignore_existed = get_gitignore_path(project_dir).exists()
    if update_gitignore(project_dir, gitignore_patterns(cfg.venv_directory)):
        cfg.gitignore_created = not gitignore_existed or bool(existing and existing.gitignore_created)
    cfg.dotenv_created = write_dotenv(project_dir) or bool(existing and existing.dotenv_created)
    write_project_config(project_dir, cfg)
    if cfg.direnv:
        write_envrc(project_dir, backend, env_path.relative_to(project_dir).as_posix(), log=log)
        if find_direnv() is None:
            log("Warning: direnv not found; .envrc will not activate automatically. See https://direnv.net/")

    log(f"\nInitialized {backend.value} environment at {env_path.relative_to(project_dir)}")
    return InitResult(backend, env_path, cfg.python_version, created=True)


# =============================================================================
# Purge
# =============================================================================

def purge(
    project_dir: Path,
    venv_dir: Optional[str] = None,
    keep_testenv: bool = False,
    yes: bool = False,
    settings: Optional[Settings] = None,
    ask: Ask = input,
    log: Callable[[str], None] = print,
) -> bool:
    """
    Remove everything pyve created in project_dir except .python-version.

    Idempotent: purging a clean directory succeeds and changes nothing.

    Returns:
        False if the user declined the confirmation, True otherwise.
    """
    project_dir = Path(project_dir).resolve()
    settings = settings or load_settings()

    cfg = None
    try:
        cfg = load_project_config(project_dir)
    except ConfigError as e:
        log(f"Warning: {e}")

    if venv_dir is None:
        venv_dir = cfg.venv_directory if cfg else DEFAULT_VENV_DIR
    venv_dir = validate_venv_dir_name(venv_dir)

    if not (yes or settings.force_yes):
        if not confirm(f"Remove the pyve environment and configuration from {project_dir}?", ask=ask):
            log("Cancelled.")
            return False

    removed = []

    venv_path = get_venv_path(project_dir, venv_dir)
    if venv_path.exists() and (is_venv(venv_path) or cfg is not None):
        _rmtree(venv_path)
        removed.append(venv_dir)

    pyve_dir = get_pyve_dir(project_dir)
    if pyve_dir.exists():
        testenv_dir = get_testenv_dir(project_dir)
        for child in pyve_dir.iterdir():
            if keep_testenv and child == testenv_dir:
                continue
            _rmtree(child)
        if not any(pyve_dir.iterdir()):
            pyve_dir.rmdir()
        removed.append(pyve_dir.name)

    if remove_gitignore_block(project_dir, delete_if_empty=cfg is not None and cfg.gitignore_created):
        removed.append(".gitignore entries")
    if remove_envrc(project_dir):
        removed.append(".envrc")
    if cfg is not None and cfg.dotenv_created and remove_dotenv(project_dir):
        removed.append(".env")

    if removed:
        log(f"Removed: {', '.join(removed)}")
    else:
        log("Nothing to purge.")
    return True
