"""
`pyve --install` / `pyve --uninstall` - put a launcher for this pyve on PATH.

The launcher lives at ~/.local/bin/pyve and the install record at
~/.pyve/install.toml.
"""

import os
import shutil
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import tomli
import tomli_w

from .errors import PyveError

from . import __version__

LAUNCHER_MARKER = "# pyve-managed launcher"
PROFILE_MARKER = "# pyve: add ~/.local/bin to PATH"
INSTALL_RECORD = "install.toml"


def get_local_bin_dir() -> Path:
    return Path.home() / ".local" / "bin"


def get_launcher_path() -> Path:
    return get_local_bin_dir() / "pyve"


def get_user_pyve_dir() -> Path:
    return Path.home() / ".pyve"


def get_shell_profile() -> Path:
    shell = os.environ.get("SHELL", "/bin/bash")
    return Path.home() / (".zshrc" if "zsh" in shell else ".bashrc")


def render_launcher(python: str) -> str:
    return f'#!/bin/sh\n{LAUNCHER_MARKER}\nexec "{python}" -m pyve "$@"\n'


def _on_path(directory: Path) -> bool:
    entries = os.environ.get("PATH", "").split(os.pathsep)
    return any(Path(p).expanduser() == directory for p in entries if p)


def _add_to_shell_profile(bin_dir: Path, log: Callable[[str], None]) -> Optional[Path]:
    rc_file = get_shell_profile()
    existing = rc_file.read_text() if rc_file.exists() else ""
    if PROFILE_MARKER in existing:
        return None
    with open(rc_file, "a") as f:
        f.write(f'\n{PROFILE_MARKER}\nexport PATH="{bin_dir}:$PATH"\n')
    log(f"Added {bin_dir} to PATH in {rc_file} (restart your shell)")
    return rc_file


def _remove_from_shell_profile() -> bool:
    rc_file = get_shell_profile()
    if not rc_file.exists():
        return False
    lines = rc_file.read_text().splitlines()
    if PROFILE_MARKER not in lines:
        return False
    kept = []
    skip_next = False
    for line in lines:
        if skip_next:
            skip_next = False
            continue
        if line == PROFILE_MARKER:
            if kept and not kept[-1].strip():
                kept.pop()
            skip_next = True
            continue
        kept.append(line)
    rc_file.write_text("\n".join(kept) + "\n" if kept else "")
    return True


def read_install_record() -> Optional[dict]:
    path = get_user_pyve_dir() / INSTALL_RECORD
    if not path.exists():
        return None
    with open(path, "rb") as f:
        return tomli.load(f)


def install_self(log: Callable[[str], None] = print) -> Path:
    """
    Install the launcher and record the install.

    Returns:
        Path to the launcher.
    """
    launcher = get_launcher_path()
    if launcher.exists() and LAUNCHER_MARKER not in launcher.read_text(errors="replace"):
        raise PyveError(f"{launcher} exists and was not installed by pyve; remove it first.")

    launcher.parent.mkdir(parents=True, exist_ok=True)
    launcher.write_text(render_launcher(sys.executable))
    launcher.chmod(0o755)
    log(f"Installed launcher: {launcher}")

    record_dir = get_user_pyve_dir()
    record_dir.mkdir(parents=True, exist_ok=True)
    record = {
        "version": __version__,
        "python": sys.executable,
        "launcher": str(launcher),
        "installed_at": datetime.now().isoformat(timespec="seconds"),
    }
    (record_dir / INSTALL_RECORD).write_text(tomli_w.dumps(record))

    if not _on_path(launcher.parent):
        _add_to_shell_profile(launcher.parent, log)
    return launcher


def uninstall_self(log: Callable[[str], None] = print) -> bool:
    """
    Remove the launcher, ~/.pyve and the shell-profile PATH line.

    Returns:
        True if anything was removed.
    """
    removed = False
    launcher = get_launcher_path()
    if launcher.exists():
        if LAUNCHER_MARKER not in launcher.read_text(errors="replace"):
            raise PyveError(f"{launcher} was not installed by pyve; leaving it in place.")
        launcher.unlink()
        log(f"Removed {launcher}")
        removed = True

    user_dir = get_user_pyve_dir()
    if user_dir.exists():
        shutil.rmtree(user_dir)
        log(f"Removed {user_dir}")
        removed = True

    if _remove_from_shell_profile():
        log(f"Removed PATH entry from {get_shell_profile()}")
        removed = True

    if not removed:
        log("pyve is not installed.")
    return removed
