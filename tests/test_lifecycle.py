"""Tests for initialize / purge / re-initialize / set_python_version."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from conftest import CURRENT_VERSION, snapshot
from pyve import __version__
from pyve.config import Backend, Settings, load_project_config, write_project_config
from pyve.config.types import ProjectConfig
from pyve.errors import CommandFailed, ConfigError, PyveError
from pyve.lifecycle import InitOptions, ensure_python, initialize, purge, set_python_version


def quiet(msg: str) -> None:
    pass


def init(project: Path, **kwargs):
    interactive = kwargs.pop("interactive", False)
    ask = kwargs.pop("ask", input)
    kwargs.setdefault("python_version", CURRENT_VERSION)
    return initialize(project, InitOptions(**kwargs), ask=ask, interactive=interactive, log=quiet)


class TestInitVenv:
    def test_creates_environment(self, project: Path, fake_venv) -> None:
        result = init(project)

        assert result.backend == Backend.VENV
        assert result.env_path == project / ".venv"
        assert fake_venv == [project / ".venv"]
        assert (project / ".python-version").read_text() == f"{CURRENT_VERSION}\n"
        assert (project / ".envrc").exists()
        assert (project / ".env").exists()
        assert ".venv/" in (project / ".gitignore").read_text()

        cfg = load_project_config(project)
        assert cfg.backend == Backend.VENV
        assert cfg.pyve_version == __version__
        assert cfg.python_version == CURRENT_VERSION
        assert cfg.venv_directory == ".venv"

    def test_custom_venv_dir(self, project: Path, fake_venv) -> None:
        init(project, venv_dir="env")
        assert (project / "env" / "pyvenv.cfg").exists()
        assert load_project_config(project).venv_directory == "env"

    def test_reserved_venv_dir(self, project: Path, fake_venv) -> None:
        with pytest.raises(ConfigError, match="reserved"):
            init(project, venv_dir=".git")
        assert not (project / ".pyve").exists()

    def test_existing_python_version_kept(self, project: Path, fake_venv) -> None:
        (project / ".python-version").write_text(f"# pin\n{CURRENT_VERSION}\n")
        init(project, python_version=None)
        assert (project / ".python-version").read_text() == f"# pin\n{CURRENT_VERSION}\n"

    def test_no_direnv(self, project: Path, fake_venv) -> None:
        init(project, direnv=False)
        assert not (project / ".envrc").exists()
        assert load_project_config(project).direnv is False

    def test_interpreter_not_found(self, project: Path, fake_venv) -> None:
        with pytest.raises(PyveError, match="no version manager"):
            init(project, python_version="2.7.18")
        assert fake_venv == []
        assert not (project / ".python-version").exists()

    def test_venv_failure_surfaces_stderr(self, project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def failing(python, env_path, log=print):
            raise CommandFailed([str(python), "-m", "venv", str(env_path)], None, 1, "ensurepip is not available")

        monkeypatch.setattr("pyve.lifecycle.create_venv", failing)
        with pytest.raises(CommandFailed) as excinfo:
            init(project)
        assert "ensurepip is not available" in str(excinfo.value)
        assert excinfo.value.returncode == 1
        assert not (project / ".python-version").exists()


class TestInitMicromamba:
    def test_creates_prefix(self, project: Path, environment_yml: Path, fake_micromamba: Path) -> None:
        result = init(project, python_version=None)

        assert result.backend == Backend.MICROMAMBA
        prefix = project / ".pyve" / "envs" / "sci-project"
        assert result.env_path == prefix
        assert (prefix / "conda-meta").is_dir()
        assert not (project / ".python-version").exists()

        cfg = load_project_config(project)
        assert cfg.backend == Backend.MICROMAMBA
        assert cfg.env_name == "sci-project"
        assert 'CONDA_PREFIX="$PWD/.pyve/envs/sci-project"' in (project / ".envrc").read_text()

    def test_env_name_option(self, project: Path, environment_yml: Path, fake_micromamba: Path) -> None:
        init(project, env_name="custom")
        assert (project / ".pyve" / "envs" / "custom" / "conda-meta").is_dir()

    def test_missing_micromamba(self, project: Path, environment_yml: Path) -> None:
        with pytest.raises(PyveError, match="Micromamba is not installed"):
            init(project)

    def test_missing_environment_file(self, project: Path, fake_micromamba: Path) -> None:
        with pytest.raises(ConfigError, match="needs an environment file"):
            init(project, backend="micromamba")

    def test_strict_stale_lock(self, project: Path, environment_yml: Path, fake_micromamba: Path) -> None:
        lock = project / "conda-lock.yml"
        lock.write_text("package:\n  - name: python\n")
        os.utime(lock, (1_000_000, 1_000_000))
        with pytest.raises(ConfigError, match="stale"):
            init(project, strict=True)

    def test_strict_missing_lock(self, project: Path, environment_yml: Path, fake_micromamba: Path) -> None:
        with pytest.raises(ConfigError, match="Lock file missing"):
            init(project, strict=True)

    def test_failed_create(self, project: Path, environment_yml: Path, fake_micromamba: Path) -> None:
        fake_micromamba.write_text('#!/bin/sh\necho "solver failed: nothing provides numpy" >&2\nexit 1\n')
        with pytest.raises(CommandFailed, match="nothing provides numpy"):
            init(project)


class TestPurge:
    def test_init_then_purge_restores_directory(self, project: Path, fake_venv) -> None:
        (project / "requirements.txt").write_text("requests\n")
        (project / ".gitignore").write_text("*.log\n")
        (project / "main.py").write_text("print('hi')\n")
        before = snapshot(project)

        init(project)
        purge(project, yes=True, log=quiet)

        after = snapshot(project)
        assert after.pop(".python-version") == f"{CURRENT_VERSION}\n".encode()
        assert after == before

    def test_purge_keeps_python_version(self, project: Path, fake_venv) -> None:
        init(project)
        purge(project, yes=True, log=quiet)
        assert (project / ".python-version").exists()

    def test_idempotent(self, project: Path) -> None:
        assert purge(project, yes=True, log=quiet)
        assert purge(project, yes=True, log=quiet)
        assert list(project.iterdir()) == []

    def test_user_files_survive(self, project: Path, fake_venv) -> None:
        (project / ".envrc").write_text("layout python\n")
        init(project)
        (project / ".env").write_text("TOKEN=abc\n")
        purge(project, yes=True, log=quiet)
        assert (project / ".envrc").read_text() == "layout python\n"
        assert (project / ".env").read_text() == "TOKEN=abc\n"

    def test_existing_empty_dotfiles_survive(self, project: Path, fake_venv) -> None:
        (project / ".env").touch()
        (project / ".gitignore").touch()
        init(project)
        cfg = load_project_config(project)
        assert not cfg.dotenv_created
        assert not cfg.gitignore_created

        purge(project, yes=True, log=quiet)
        assert (project / ".env").read_bytes() == b""
        assert (project / ".gitignore").read_bytes() == b""

    def test_created_dotfiles_removed(self, project: Path, fake_venv) -> None:
        init(project)
        cfg = load_project_config(project)
        assert cfg.dotenv_created
        assert cfg.gitignore_created

        purge(project, yes=True, log=quiet)
        assert not (project / ".env").exists()
        assert not (project / ".gitignore").exists()

    def test_declined(self, project: Path, fake_venv) -> None:
        init(project)
        assert not purge(project, ask=lambda q: "n", log=quiet)
        assert (project / ".venv").exists()

    def test_force_yes_setting(self, project: Path, fake_venv) -> None:
        init(project)
        assert purge(project, settings=Settings(force_yes=True), log=quiet)
        assert not (project / ".venv").exists()

    def test_keep_testenv(self, project: Path, fake_venv) -> None:
        init(project)
        testenv = project / ".pyve" / "testenv" / "venv"
        testenv.mkdir(parents=True)
        purge(project, keep_testenv=True, yes=True, log=quiet)
        assert testenv.exists()
        assert not (project / ".pyve" / "config.toml").exists()


class TestReinitialize:
    def test_non_interactive_requires_flag(self, project: Path, fake_venv) -> None:
        init(project)
        with pytest.raises(PyveError, match="already initialized"):
            init(project)

    def test_update_refreshes_version(self, project: Path, fake_venv) -> None:
        init(project)
        cfg = load_project_config(project)
        cfg.pyve_version = "0.1.0"
        write_project_config(project, cfg)

        result = init(project, update=True)
        assert result.updated
        assert load_project_config(project).pyve_version == __version__
        assert fake_venv == [project / ".venv"]

    def test_update_legacy_config(self, project: Path, fake_venv) -> None:
        write_project_config(project, ProjectConfig(backend=Backend.VENV))
        init(project, update=True)
        assert not load_project_config(project).is_legacy

    def test_update_rejects_backend_change(self, project: Path, fake_venv) -> None:
        init(project)
        with pytest.raises(PyveError, match="Backend change detected"):
            init(project, update=True, backend="micromamba")

    def test_force_rebuilds_and_keeps_testenv(self, project: Path, fake_venv) -> None:
        init(project)
        marker = project / ".pyve" / "testenv" / "venv" / "marker"
        marker.parent.mkdir(parents=True)
        marker.write_text("x")

        init(project, force=True, yes=True)
        assert fake_venv == [project / ".venv", project / ".venv"]
        assert marker.exists()

    def test_force_declined(self, project: Path, fake_venv) -> None:
        init(project)
        assert init(project, force=True, ask=lambda q: "n") is None
        assert fake_venv == [project / ".venv"]

    def test_menu(self, project: Path, fake_venv) -> None:
        init(project)
        assert init(project, interactive=True, ask=lambda q: "3") is None

        answers = iter(["2", "y"])
        result = init(project, interactive=True, ask=lambda q: next(answers))
        assert result.created
        assert len(fake_venv) == 2


class TestPythonVersion:
    def test_set_python_version(self, project: Path) -> None:
        assert set_python_version(project, CURRENT_VERSION, log=quiet) == CURRENT_VERSION
        assert (project / ".python-version").read_text() == f"{CURRENT_VERSION}\n"
        assert not (project / ".pyve").exists()

    def test_set_invalid(self, project: Path) -> None:
        with pytest.raises(ConfigError):
            set_python_version(project, "latest", log=quiet)
        assert not (project / ".python-version").exists()

    def test_ensure_python_prefers_current_interpreter(self) -> None:
        assert ensure_python(CURRENT_VERSION) == Path(sys.executable)
