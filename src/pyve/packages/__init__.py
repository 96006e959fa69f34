"""Packages layer - third-party tool binaries pyve manages itself."""

from .micromamba import (
    bootstrap_micromamba,
    get_micromamba_download_url,
    get_micromamba_location,
    get_micromamba_path,
    get_micromamba_version,
    locate_micromamba,
    micromamba_install_hint,
)

__all__ = [
    "bootstrap_micromamba",
    "get_micromamba_download_url",
    "get_micromamba_location",
    "get_micromamba_path",
    "get_micromamba_version",
    "locate_micromamba",
    "micromamba_install_hint",
]
