"""Shared pytest fixtures for pyve tests."""

from __future__ import annotations

import stat
import sys
from pathlib import Path
from typing import List

import pytest

from pyve.config import ENV_VARS
from pyve.detection import tools

CURRENT_VERSION = "{}.{}.{}".format(*sys.version_info[:3])

FAKE_MICROMAMBA = """#!/bin/sh
# create -p PREFIX -f FILE -y
if [ "$1" = "--version" ]; then
    echo "1.5.3"
    exit 0
fi
if [ "$1" = "create" ]; then
    mkdir -p "$3/conda-meta" "$3/bin"
    exit 0
fi
echo "unsupported: $*" >&2
exit 1
"""


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Clear PYVE_* variables, point HOME at a tmp dir, and skip the distutils shim."""
    for name in ENV_VARS + ("CI",):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PYVE_DISABLE_DISTUTILS_SHIM", "1")
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def no_external_tools(monkeypatch: pytest.MonkeyPatch) -> None:
    """asdf, pyenv, direnv, micromamba and pythonX.Y are never found on PATH."""
    monkeypatch.setattr(tools, "find_executable", lambda name: None)


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty project directory, also the current working directory."""
    d = tmp_path / "myproject"
    d.mkdir()
    monkeypatch.chdir(d)
    return d


@pytest.fixture
def fake_venv(monkeypatch: pytest.MonkeyPatch) -> List[Path]:
    """
    Replace `python -m venv` with a fast stand-in that lays out bin/python,
    a bin/hello script and pyvenv.cfg. Returns the list of created paths.
    """
    created: List[Path] = []

    def create_venv(python, env_path, log=print):
        env_path = Path(env_path)
        bin_dir = env_path / "bin"
        bin_dir.mkdir(parents=True)
        (bin_dir / "python").symlink_to(sys.executable)
        hello = bin_dir / "hello"
        hello.write_text('#!/bin/sh\necho "hello from $VIRTUAL_ENV"\nexit 7\n')
        hello.chmod(hello.stat().st_mode | stat.S_IXUSR)
        (env_path / "pyvenv.cfg").write_text(
            f"home = {Path(sys.executable).resolve().parent}\n"
            "include-system-site-packages = false\n"
            f"version = {CURRENT_VERSION}\n"
        )
        created.append(env_path)
        return bin_dir / "python"

    monkeypatch.setattr("pyve.lifecycle.create_venv", create_venv)
    monkeypatch.setattr("pyve.runner.create_venv", create_venv)
    return created


@pytest.fixture
def fake_micromamba(isolated_env: Path) -> Path:
    """A micromamba stand-in in the user sandbox (~/.pyve/bin)."""
    bin_dir = isolated_env / ".pyve" / "bin"
    bin_dir.mkdir(parents=True)
    path = bin_dir / "micromamba"
    path.write_text(FAKE_MICROMAMBA)
    path.chmod(0o755)
    return path


@pytest.fixture
def environment_yml(project: Path) -> Path:
    path = project / "environment.yml"
    path.write_text(
        "name: sci-project\n"
        "channels:\n"
        "  - conda-forge\n"
        "dependencies:\n"
        "  - python=3.11\n"
        "  - numpy\n"
    )
    return path


def snapshot(root: Path) -> dict:
    """Relative path -> file bytes (None for directories)."""
    return {
        str(p.relative_to(root)): (p.read_bytes() if p.is_file() and not p.is_symlink() else None)
        for p in sorted(root.rglob("*"))
    }
