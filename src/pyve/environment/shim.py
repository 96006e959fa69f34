"""
distutils compatibility shim for Python 3.12+.

Python 3.12 removed distutils from the standard library. Older build
scripts still import it, so pyve drops a sitecustomize.py into the
environment that routes distutils to setuptools' bundled copy.
"""

from pathlib import Path
from typing import Callable, Optional, Union

from ..detection.version import version_tuple
from ..process import run_command

SHIM_MARKER = "# pyve-managed: distutils shim"

SHIM_SOURCE = f"""{SHIM_MARKER}
import os
os.environ.setdefault("SETUPTOOLS_USE_DISTUTILS", "local")
import setuptools  # noqa: F401
"""

_SITE_PACKAGES_PROBE = (
    "import site, sysconfig; "
    "sp = (getattr(site, 'getsitepackages', lambda: [])() or [sysconfig.get_paths()['purelib']])[0]; "
    "print(sp)"
)


def get_python_version(python: Union[str, Path]) -> str:
    result = run_command(
        [python, "-c", "import sys; print('.'.join(map(str, sys.version_info[:3])))"]
    )
    return result.stdout.strip()


def needs_shim(python_version: str) -> bool:
    return version_tuple(python_version)[:2] >= (3, 12)


def get_site_packages(python: Union[str, Path]) -> Optional[Path]:
    result = run_command([python, "-c", _SITE_PACKAGES_PROBE], check=False)
    out = result.stdout.strip()
    return Path(out) if result.returncode == 0 and out else None


def write_sitecustomize(site_packages: Path, log: Callable[[str], None] = print) -> bool:
    """
    Write the shim into site_packages/sitecustomize.py.

    A sitecustomize.py that pyve did not write is left alone.

    Returns:
        True if the file was written or updated.
    """
    path = site_packages / "sitecustomize.py"
    if path.exists():
        current = path.read_text()
        if SHIM_MARKER not in current:
            log("sitecustomize.py exists and is not pyve-managed; skipping distutils shim")
            return False
        if current == SHIM_SOURCE:
            return False
    site_packages.mkdir(parents=True, exist_ok=True)
    path.write_text(SHIM_SOURCE)
    return True


def install_distutils_shim(
    python: Union[str, Path],
    disabled: bool = False,
    log: Callable[[str], None] = print,
) -> bool:
    """
    Install the shim into the environment owning `python` when it is 3.12+.

    Returns:
        True if the shim was installed.
    """
    if disabled:
        log("Distutils shim disabled (PYVE_DISABLE_DISTUTILS_SHIM=1)")
        return False
    if not needs_shim(get_python_version(python)):
        return False

    probe = run_command([python, "-c", "import setuptools"], check=False)
    if probe.returncode != 0:
        run_command([python, "-m", "pip", "install", "-U", "setuptools", "wheel"])

    site_packages = get_site_packages(python)
    if site_packages is None:
        log("Could not locate site-packages; skipping distutils shim")
        return False
    if write_sitecustomize(site_packages, log=log):
        log(f"Installed distutils shim in {site_packages}")
        return True
    return False
