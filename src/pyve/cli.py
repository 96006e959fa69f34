"""
CLI for pyve.

Usage:
    pyve --init [VERSION | VENV_DIR] [--python-version VER] [--backend venv|micromamba|auto]
    pyve --purge [VENV_DIR]
    pyve --validate
    pyve --python-version [VER]
    pyve --config
    pyve --install | --uninstall
    pyve doctor
    pyve run <command> [args...]
    pyve test [pytest args...]
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import tomli_w

from . import __version__
from .config import (
    AUTO_BACKEND,
    DEFAULT_PYTHON_VERSION,
    DEFAULT_VENV_DIR,
    ENV_VARS,
    Backend,
    Settings,
    get_config_path,
    load_project_config,
    load_settings,
)
from .config.parser import config_to_dict, is_python_version
from .detection import resolve_version
from .errors import CommandFailed
from .doctor import run_doctor
from .lifecycle import InitOptions, initialize, purge, set_python_version
from .packages.micromamba import PROJECT, USER
from .runner import run_in_env, run_tests
from .self_install import install_self, uninstall_self
from .validate import run_validation

logger = logging.getLogger("pyve")

# Commands whose arguments are passed through untouched.
PASSTHROUGH_COMMANDS = ("run", "test")


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.WARNING,
        format="[pyve] %(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyve",
        description="Per-project Python environments: version managers, venv/micromamba and direnv",
    )
    parser.add_argument(
        "--version", action="version", version=f"pyve {__version__}"
    )

    actions = parser.add_mutually_exclusive_group()
    actions.add_argument(
        "--init",
        nargs="?",
        const="",
        metavar="VERSION|VENV_DIR",
        help=(
            "Create the project environment. A MAJOR.MINOR[.PATCH] argument pins the "
            f"Python version; anything else names the venv directory (default: {DEFAULT_VENV_DIR})"
        ),
    )
    actions.add_argument(
        "--purge",
        nargs="?",
        const="",
        metavar="VENV_DIR",
        help="Remove the project environment and pyve's files (keeps .python-version)",
    )
    actions.add_argument(
        "--validate",
        action="store_true",
        help="Check the environment, .python-version and backend markers agree",
    )
    actions.add_argument(
        "--config",
        action="store_true",
        help="Show defaults, environment overrides and project configuration",
    )
    actions.add_argument(
        "--install",
        action="store_true",
        help="Install a pyve launcher into ~/.local/bin",
    )
    actions.add_argument(
        "--uninstall",
        action="store_true",
        help="Remove the pyve launcher and ~/.pyve",
    )

    parser.add_argument(
        "--python-version",
        nargs="?",
        const="",
        metavar="VER",
        help="Print the resolved Python version, or pin VER in .python-version",
    )
    parser.add_argument(
        "--backend",
        choices=[b.value for b in Backend] + [AUTO_BACKEND],
        help="Environment backend (default: auto-detect)",
    )
    parser.add_argument("--env-name", help="micromamba environment name")
    parser.add_argument("--force", "-f", action="store_true", help="Purge and re-initialize")
    parser.add_argument("--update", action="store_true", help="Update an existing configuration in place")
    parser.add_argument("--yes", "-y", action="store_true", help="Answer yes to confirmations")
    parser.add_argument("--no-direnv", action="store_true", help="Do not write .envrc")
    parser.add_argument("--strict", action="store_true", help="Treat missing or stale lock files as errors")
    parser.add_argument("--auto-bootstrap", action="store_true", help="Download micromamba if it is missing")
    parser.add_argument(
        "--bootstrap-to",
        choices=[PROJECT, USER],
        default=USER,
        help="Where --auto-bootstrap installs micromamba (default: user)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.add_parser(
        "doctor",
        help="Show environment diagnostics",
        description="Report backend, versions, environment location, micromamba and direnv",
    )
    subparsers.add_parser(
        "run",
        help="Run a command inside the project environment",
        description="pyve run <command> [args...]",
    )
    subparsers.add_parser(
        "test",
        help="Run pytest from the dedicated test-runner environment",
        description="pyve test [pytest args...]",
    )
    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the pyve CLI."""
    argv = list(sys.argv[1:] if args is None else args)
    settings = load_settings()
    _configure_logging(settings)

    try:
        if argv and argv[0] in PASSTHROUGH_COMMANDS and argv[1:2] not in (["-h"], ["--help"]):
            if argv[0] == "run":
                return cmd_run(argv[1:])
            return cmd_test(argv[1:], settings)

        parser = build_parser()
        parsed = parser.parse_args(argv)

        if parsed.init is not None:
            return cmd_init(parsed, settings)
        if parsed.purge is not None:
            return cmd_purge(parsed, settings)
        if parsed.validate:
            return cmd_validate(settings)
        if parsed.config:
            return cmd_config(settings)
        if parsed.install:
            return cmd_install()
        if parsed.uninstall:
            return cmd_uninstall()
        if parsed.python_version is not None:
            return cmd_python_version(parsed.python_version, settings)
        if parsed.command == "doctor":
            return run_doctor(Path.cwd(), settings)

        parser.print_help()
        return 0
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130
    except CommandFailed as e:
        logger.debug("command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return e.returncode or 1
    except Exception as e:
        logger.debug("unhandled error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_init(args, settings: Settings) -> int:
    """Handle --init."""
    venv_dir, python_version = args.init or None, args.python_version or None
    if venv_dir and is_python_version(venv_dir):
        venv_dir, python_version = None, python_version or args.init
    options = InitOptions(
        venv_dir=venv_dir,
        python_version=python_version,
        backend=args.backend,
        env_name=args.env_name,
        force=args.force,
        update=args.update,
        yes=args.yes,
        direnv=not args.no_direnv,
        strict=args.strict,
        auto_bootstrap=args.auto_bootstrap,
        bootstrap_to=args.bootstrap_to,
    )
    result = initialize(Path.cwd(), options, settings)
    return 0 if result is not None else 1


def cmd_purge(args, settings: Settings) -> int:
    """Handle --purge."""
    done = purge(Path.cwd(), venv_dir=args.purge or None, yes=args.yes, settings=settings)
    return 0 if done else 1


def cmd_validate(settings: Settings) -> int:
    return run_validation(Path.cwd(), settings)


def cmd_python_version(value: str, settings: Settings) -> int:
    """Print the resolved version, or pin a new one."""
    project_dir = Path.cwd()
    if not value:
        print(resolve_version(project_dir, settings=settings, config=load_project_config(project_dir)))
        return 0
    set_python_version(project_dir, value, settings)
    return 0


def cmd_config(settings: Settings) -> int:
    """Handle --config."""
    project_dir = Path.cwd()
    print("Defaults:")
    print(f"  backend: {AUTO_BACKEND} (detected from project files, venv if none)")
    print(f"  python version: {DEFAULT_PYTHON_VERSION}")
    print(f"  venv directory: {DEFAULT_VENV_DIR}")

    print("\nEnvironment overrides:")
    overrides = [(name, os.environ[name]) for name in ENV_VARS if os.environ.get(name)]
    if overrides:
        for name, value in overrides:
            print(f"  {name}={value}")
    else:
        print("  (none set)")

    config_path = get_config_path(project_dir)
    print(f"\nProject ({config_path}):")
    cfg = load_project_config(project_dir)
    if cfg is None:
        print("  not initialized")
    else:
        for line in tomli_w.dumps(config_to_dict(cfg)).splitlines():
            print(f"  {line}" if line else "")
    return 0


def cmd_install() -> int:
    install_self()
    return 0


def cmd_uninstall() -> int:
    uninstall_self()
    return 0


def cmd_run(command: List[str]) -> int:
    """Handle `pyve run`."""
    return run_in_env(Path.cwd(), command)


def cmd_test(pytest_args: List[str], settings: Settings) -> int:
    """Handle `pyve test`."""
    return run_tests(Path.cwd(), pytest_args, settings)


if __name__ == "__main__":
    sys.exit(main())
