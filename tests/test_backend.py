"""Tests for backend detection and resolution."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from pyve.config import Backend, ProjectConfig, Settings
from pyve.detection import (
    AMBIGUOUS,
    choose_backend,
    detect_backend_from_files,
    resolve_backend,
)
from pyve.detection.backend import NONE
from pyve.errors import ConfigError


def touch(d: Path, *names: str) -> None:
    for name in names:
        (d / name).write_text("")


class TestDetectBackendFromFiles:
    @pytest.mark.parametrize(
        "files, expected",
        [
            ((), NONE),
            (("environment.yml",), "micromamba"),
            (("conda-lock.yml",), "micromamba"),
            (("environment.yml", "conda-lock.yml"), "micromamba"),
            (("requirements.txt",), "venv"),
            (("pyproject.toml",), "venv"),
            (("environment.yml", "requirements.txt"), AMBIGUOUS),
            (("conda-lock.yml", "pyproject.toml"), AMBIGUOUS),
        ],
    )
    def test_marker_combinations(self, tmp_path: Path, files, expected) -> None:
        touch(tmp_path, *files)
        assert detect_backend_from_files(tmp_path) == expected

    def test_directories_are_not_markers(self, tmp_path: Path) -> None:
        (tmp_path / "environment.yml").mkdir()
        assert detect_backend_from_files(tmp_path) == NONE


class TestChooseBackend:
    def test_total_over_marker_results(self) -> None:
        assert choose_backend(NONE) == Backend.VENV
        assert choose_backend("venv") == Backend.VENV
        assert choose_backend("micromamba") == Backend.MICROMAMBA
        assert choose_backend(AMBIGUOUS) == Backend.VENV

    def test_ambiguous_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="pyve"):
            choose_backend(AMBIGUOUS)
        assert "defaulting to venv" in caplog.text

    def test_explicit_wins(self) -> None:
        result = choose_backend(
            "venv", explicit="micromamba", env_backend="venv", config_backend=Backend.VENV
        )
        assert result == Backend.MICROMAMBA

    def test_env_beats_config(self) -> None:
        assert choose_backend(NONE, env_backend="micromamba", config_backend=Backend.VENV) == Backend.MICROMAMBA

    def test_auto_falls_through(self) -> None:
        result = choose_backend("micromamba", explicit="auto", env_backend="auto")
        assert result == Backend.MICROMAMBA

    def test_config_beats_markers(self) -> None:
        assert choose_backend("micromamba", config_backend=Backend.VENV) == Backend.VENV

    def test_invalid_name(self) -> None:
        with pytest.raises(ConfigError, match="Invalid backend 'conda'"):
            choose_backend(NONE, explicit="conda")


class TestResolveBackend:
    def test_uses_markers(self, tmp_path: Path) -> None:
        touch(tmp_path, "environment.yml")
        assert resolve_backend(tmp_path) == Backend.MICROMAMBA

    def test_uses_settings_and_config(self, tmp_path: Path) -> None:
        touch(tmp_path, "environment.yml")
        cfg = ProjectConfig(backend=Backend.VENV)
        assert resolve_backend(tmp_path, config=cfg) == Backend.VENV
        settings = Settings(backend="micromamba")
        assert resolve_backend(tmp_path, settings=settings, config=cfg) == Backend.MICROMAMBA

    def test_default_is_venv(self, tmp_path: Path) -> None:
        assert resolve_backend(tmp_path) == Backend.VENV
