"""
Micromamba binary management.

Detection order:
1. <project>/.pyve/bin/micromamba (project sandbox)
2. ~/.pyve/bin/micromamba (user sandbox)
3. micromamba on PATH

See: https://mamba.readthedocs.io/en/latest/installation/micromamba-installation.html
"""

import io
import os
import platform as platform_mod
import re
import shutil
import stat
import subprocess
import tarfile
import tempfile
import urllib.request
from pathlib import Path
from typing import Callable, Optional, Tuple

from ..detection import tools
from ..errors import PyveError

MICROMAMBA_URL = "https://micro.mamba.pm/api/micromamba/{platform}/latest"

# (uname -s, uname -m) -> conda platform
MICROMAMBA_PLATFORMS = {
    ("Darwin", "arm64"): "osx-arm64",
    ("Darwin", "aarch64"): "osx-arm64",
    ("Darwin", "x86_64"): "osx-64",
    ("Linux", "x86_64"): "linux-64",
    ("Linux", "aarch64"): "linux-aarch64",
    ("Linux", "arm64"): "linux-aarch64",
    ("Linux", "ppc64le"): "linux-ppc64le",
}

PROJECT = "project"
USER = "user"
SYSTEM = "system"


def get_project_bin_dir(project_dir: Path) -> Path:
    return Path(project_dir) / ".pyve" / "bin"


def get_user_bin_dir() -> Path:
    return Path.home() / ".pyve" / "bin"


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def locate_micromamba(project_dir: Path) -> Optional[Tuple[Path, str]]:
    """Return (path, location) for the first micromamba found, or None."""
    for location, candidate in (
        (PROJECT, get_project_bin_dir(project_dir) / "micromamba"),
        (USER, get_user_bin_dir() / "micromamba"),
    ):
        if _is_executable(candidate):
            return candidate.resolve(), location

    system = tools.find_executable("micromamba")
    if system:
        return Path(system), SYSTEM
    return None


def get_micromamba_path(project_dir: Path) -> Optional[Path]:
    found = locate_micromamba(project_dir)
    return found[0] if found else None


def get_micromamba_location(project_dir: Path) -> Optional[str]:
    """Where micromamba was found: project, user, system, or None."""
    found = locate_micromamba(project_dir)
    return found[1] if found else None


def get_micromamba_version(micromamba: Path) -> Optional[str]:
    """Parse X.Y.Z out of `micromamba --version` ("micromamba 1.5.3" or "1.5.3")."""
    try:
        result = subprocess.run(
            [str(micromamba), "--version"], capture_output=True, text=True, timeout=30
        )
    except (OSError, subprocess.TimeoutExpired):
        return None
    match = re.search(r"\d+\.\d+\.\d+", result.stdout)
    return match.group() if match else None


def get_micromamba_download_url() -> str:
    """Download URL for the current platform."""
    system = platform_mod.system()
    machine = platform_mod.machine()
    conda_platform = MICROMAMBA_PLATFORMS.get((system, machine))
    if conda_platform is None:
        raise PyveError(f"No micromamba download for {system}/{machine}")
    return MICROMAMBA_URL.format(platform=conda_platform)


def _download(url: str, dest: Path) -> None:
    try:
        urllib.request.urlretrieve(url, dest)
    except Exception as e:
        result = subprocess.run(
            ["curl", "-fsSL", "-o", str(dest), url],
            capture_output=True, text=True,
        )
        if result.returncode != 0:
            raise PyveError(f"Failed to download micromamba: {result.stderr.strip()}") from e


def extract_micromamba(archive: bytes, dest: Path) -> Path:
    """Extract bin/micromamba from a release tarball into dest."""
    try:
        with tarfile.open(fileobj=io.BytesIO(archive), mode="r:*") as tar:
            member = tar.extractfile("bin/micromamba")
            if member is None:
                raise PyveError("bin/micromamba missing from downloaded archive")
            data = member.read()
    except (tarfile.TarError, KeyError) as e:
        raise PyveError(f"Could not extract micromamba: {e}") from e

    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)
    dest.chmod(dest.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return dest


def bootstrap_micromamba(
    project_dir: Path,
    location: str = USER,
    log: Callable[[str], None] = print,
) -> Path:
    """
    Download micromamba into the project or user sandbox.

    Args:
        project_dir: Project root (used for the project sandbox).
        location: "project" or "user".
        log: Logging callback.

    Returns:
        Path to the installed binary.
    """
    if location == PROJECT:
        bin_dir = get_project_bin_dir(project_dir)
    elif location == USER:
        bin_dir = get_user_bin_dir()
    else:
        raise PyveError(f"Invalid installation location: {location} (must be 'project' or 'user')")

    url = get_micromamba_download_url()
    log(f"Downloading micromamba from: {url}")

    tmp_dir = Path(tempfile.mkdtemp(prefix="pyve-micromamba-"))
    try:
        archive = tmp_dir / "micromamba.tar.bz2"
        _download(url, archive)
        if not archive.exists() or archive.stat().st_size == 0:
            raise PyveError("Downloaded micromamba archive is empty")
        binary = extract_micromamba(archive.read_bytes(), bin_dir / "micromamba")
    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)

    version = get_micromamba_version(binary) or "(unknown version)"
    log(f"Installed micromamba {version} to: {binary}")
    return binary


def micromamba_install_hint() -> str:
    return (
        "Micromamba is not installed or not in PATH.\n"
        "Installation options:\n"
        "  1. Install via package manager:\n"
        "     macOS:  brew install micromamba\n"
        "     Linux:  See https://mamba.readthedocs.io/en/latest/installation.html\n"
        "  2. Let pyve download it:\n"
        "     pyve --init --backend micromamba --auto-bootstrap"
    )
