"""Tests for `pyve --validate`."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from conftest import CURRENT_VERSION
from pyve.config import Backend, ProjectConfig, Settings, load_project_config, write_project_config
from pyve.lifecycle import InitOptions, initialize
from pyve.validate import ERROR, EXIT_ERRORS, EXIT_OK, EXIT_WARNINGS, WARNING, collect_checks, run_validation


def quiet(msg: str) -> None:
    pass


@pytest.fixture
def venv_project(project: Path, fake_venv) -> Path:
    (project / "requirements.txt").write_text("requests\n")
    initialize(project, InitOptions(python_version=CURRENT_VERSION), interactive=False, log=quiet)
    return project


@pytest.fixture
def mamba_project(project: Path, environment_yml: Path, fake_micromamba: Path) -> Path:
    initialize(project, InitOptions(), interactive=False, log=quiet)
    return project


def levels(project: Path, level: str):
    return [c.label for c in collect_checks(project) if c.level == level]


class TestValidateVenv:
    def test_consistent(self, venv_project: Path) -> None:
        lines = []
        assert run_validation(venv_project, log=lines.append) == EXIT_OK
        assert "All checks passed." in lines

    def test_uninitialized(self, project: Path) -> None:
        lines = []
        assert run_validation(project, log=lines.append) == EXIT_ERRORS
        assert any("Configuration: missing" in line for line in lines)

    def test_missing_environment(self, venv_project: Path) -> None:
        shutil.rmtree(venv_project / ".venv")
        assert run_validation(venv_project, log=quiet) == EXIT_ERRORS
        assert "Virtual environment" in levels(venv_project, ERROR)

    def test_missing_python_version_file(self, venv_project: Path) -> None:
        (venv_project / ".python-version").unlink()
        assert run_validation(venv_project, log=quiet) == EXIT_ERRORS

    def test_python_version_mismatch(self, venv_project: Path) -> None:
        (venv_project / ".python-version").write_text("2.7.18\n")
        assert run_validation(venv_project, log=quiet) == EXIT_ERRORS
        assert "Environment Python" in levels(venv_project, ERROR)

    def test_contradicting_markers(self, venv_project: Path) -> None:
        (venv_project / "requirements.txt").unlink()
        (venv_project / "environment.yml").write_text("dependencies: [python]\n")
        assert run_validation(venv_project, log=quiet) == EXIT_ERRORS
        assert "Backend markers" in levels(venv_project, ERROR)

    def test_ambiguous_markers_are_consistent(self, venv_project: Path) -> None:
        (venv_project / "environment.yml").write_text("dependencies: [python]\n")
        assert run_validation(venv_project, log=quiet) == EXIT_OK

    def test_missing_envrc_is_warning(self, venv_project: Path) -> None:
        (venv_project / ".envrc").unlink()
        assert run_validation(venv_project, log=quiet) == EXIT_WARNINGS
        assert levels(venv_project, WARNING) == ["direnv"]

    def test_legacy_config_is_warning(self, venv_project: Path) -> None:
        cfg = load_project_config(venv_project)
        cfg.pyve_version = None
        write_project_config(venv_project, cfg)
        assert run_validation(venv_project, log=quiet) == EXIT_WARNINGS

    def test_version_drift(self, venv_project: Path) -> None:
        cfg = load_project_config(venv_project)
        cfg.pyve_version = "999.0.0"
        write_project_config(venv_project, cfg)
        assert run_validation(venv_project, log=quiet) == EXIT_WARNINGS
        assert run_validation(venv_project, settings=Settings(skip_version_check=True), log=quiet) == EXIT_OK

    def test_unparseable_config(self, venv_project: Path) -> None:
        (venv_project / ".pyve" / "config.toml").write_text("backend = \n")
        assert run_validation(venv_project, log=quiet) == EXIT_ERRORS


class TestValidateMicromamba:
    def test_consistent(self, mamba_project: Path) -> None:
        assert run_validation(mamba_project, log=quiet) == EXIT_OK

    def test_python_version_agrees_with_pin(self, mamba_project: Path) -> None:
        (mamba_project / ".python-version").write_text("3.11.7\n")
        assert run_validation(mamba_project, log=quiet) == EXIT_OK
        (mamba_project / ".python-version").write_text("3.12.1\n")
        assert run_validation(mamba_project, log=quiet) == EXIT_ERRORS

    def test_missing_prefix(self, mamba_project: Path) -> None:
        shutil.rmtree(mamba_project / ".pyve" / "envs")
        assert run_validation(mamba_project, log=quiet) == EXIT_ERRORS

    def test_missing_env_name(self, project: Path) -> None:
        write_project_config(project, ProjectConfig(backend=Backend.MICROMAMBA, pyve_version="1"))
        assert "Environment name" in levels(project, ERROR)
