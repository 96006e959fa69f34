"""
Subprocess helpers.

Every external tool pyve drives (python -m venv, micromamba, asdf, pyenv,
direnv, pytest) is invoked through these functions so that failures surface
the same way: a CommandFailed carrying the child's stderr.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from .errors import CommandFailed

logger = logging.getLogger("pyve")

PathLike = Union[str, Path]


def run_command(
    command: List[PathLike],
    cwd: Optional[PathLike] = None,
    env: Optional[Mapping[str, str]] = None,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """
    Run a command with captured output.

    Args:
        command: Executable and arguments.
        cwd: Working directory.
        env: Full environment for the child (defaults to os.environ).
        check: Raise CommandFailed on non-zero exit.

    Returns:
        CompletedProcess with text stdout/stderr.

    Raises:
        CommandFailed: If check is True and the command fails, or the
            executable does not exist.
    """
    args = [str(c) for c in command]
    logger.debug("run: %s (cwd=%s)", " ".join(args), cwd)
    try:
        result = subprocess.run(
            args,
            cwd=str(cwd) if cwd is not None else None,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise CommandFailed(args, cwd, 127, str(e)) from e

    logger.debug("exit %d: %s", result.returncode, args[0])
    if check and result.returncode != 0:
        raise CommandFailed(args, cwd, result.returncode, result.stderr)
    return result


def run_passthrough(
    command: List[PathLike],
    cwd: Optional[PathLike] = None,
    env: Optional[Mapping[str, str]] = None,
) -> int:
    """Run a command attached to the caller's stdio and return its exit code."""
    args = [str(c) for c in command]
    logger.debug("exec: %s (cwd=%s)", " ".join(args), cwd)
    result = subprocess.run(
        args,
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
    )
    return result.returncode


def prepend_path(env: Dict[str, str], directory: PathLike) -> Dict[str, str]:
    """Return a copy of env with directory first on PATH."""
    env = dict(env)
    current = env.get("PATH", "")
    env["PATH"] = str(directory) + (os.pathsep + current if current else "")
    return env
