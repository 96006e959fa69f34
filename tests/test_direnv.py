"""Tests for .envrc, .env and the distutils shim files."""

from __future__ import annotations

import stat
from pathlib import Path

from pyve.config import Backend
from pyve.environment import (
    ENVRC_MARKER,
    is_pyve_envrc,
    remove_dotenv,
    remove_envrc,
    write_dotenv,
    write_envrc,
)
from pyve.environment.shim import SHIM_MARKER, SHIM_SOURCE, needs_shim, write_sitecustomize


class TestEnvrc:
    def test_venv(self, tmp_path: Path) -> None:
        assert write_envrc(tmp_path, Backend.VENV, ".venv", log=lambda m: None)
        content = (tmp_path / ".envrc").read_text()
        assert content.startswith(ENVRC_MARKER)
        assert 'export VIRTUAL_ENV="$PWD/.venv"' in content
        assert 'PATH_add ".venv/bin"' in content
        assert "dotenv_if_exists .env" in content

    def test_micromamba(self, tmp_path: Path) -> None:
        write_envrc(tmp_path, Backend.MICROMAMBA, ".pyve/envs/sci", log=lambda m: None)
        assert 'export CONDA_PREFIX="$PWD/.pyve/envs/sci"' in (tmp_path / ".envrc").read_text()

    def test_existing_left_alone(self, tmp_path: Path) -> None:
        (tmp_path / ".envrc").write_text("layout python\n")
        assert not write_envrc(tmp_path, Backend.VENV, ".venv", log=lambda m: None)
        assert (tmp_path / ".envrc").read_text() == "layout python\n"

    def test_remove_only_pyve_envrc(self, tmp_path: Path) -> None:
        (tmp_path / ".envrc").write_text("layout python\n")
        assert not is_pyve_envrc(tmp_path)
        assert not remove_envrc(tmp_path)
        assert (tmp_path / ".envrc").exists()

        (tmp_path / ".envrc").unlink()
        write_envrc(tmp_path, Backend.VENV, ".venv", log=lambda m: None)
        assert remove_envrc(tmp_path)
        assert not (tmp_path / ".envrc").exists()


class TestDotenv:
    def test_created_owner_only(self, tmp_path: Path) -> None:
        assert write_dotenv(tmp_path)
        mode = stat.S_IMODE((tmp_path / ".env").stat().st_mode)
        assert mode == 0o600
        assert not write_dotenv(tmp_path)

    def test_remove_only_when_empty(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("SECRET=1\n")
        assert not remove_dotenv(tmp_path)
        assert (tmp_path / ".env").exists()

        (tmp_path / ".env").write_text("")
        assert remove_dotenv(tmp_path)
        assert not remove_dotenv(tmp_path)


class TestDistutilsShim:
    def test_needs_shim(self) -> None:
        assert needs_shim("3.12.0")
        assert needs_shim("3.13.7")
        assert not needs_shim("3.11.9")

    def test_write_and_update(self, tmp_path: Path) -> None:
        assert write_sitecustomize(tmp_path, log=lambda m: None)
        assert (tmp_path / "sitecustomize.py").read_text() == SHIM_SOURCE
        assert not write_sitecustomize(tmp_path, log=lambda m: None)

        (tmp_path / "sitecustomize.py").write_text(SHIM_MARKER + "\n# old\n")
        assert write_sitecustomize(tmp_path, log=lambda m: None)
        assert (tmp_path / "sitecustomize.py").read_text() == SHIM_SOURCE

    def test_foreign_sitecustomize_untouched(self, tmp_path: Path) -> None:
        (tmp_path / "sitecustomize.py").write_text("import mything\n")
        messages = []
        assert not write_sitecustomize(tmp_path, log=messages.append)
        assert (tmp_path / "sitecustomize.py").read_text() == "import mything\n"
        assert "not pyve-managed" in messages[0]
