"""Exceptions raised by pyve."""

from pathlib import Path
from typing import List, Optional, Union


class PyveError(Exception):
    """Base class for all pyve errors."""


class ConfigError(PyveError):
    """A configuration or environment file is missing or invalid."""


class NotInitializedError(PyveError):
    """The project has no pyve environment yet."""

    def __init__(self, project_dir: Union[str, Path]):
        self.project_dir = Path(project_dir)
        super().__init__(
            f"Environment not initialized in {self.project_dir}. Run 'pyve --init' first."
        )


class CommandFailed(PyveError):
    """An external tool exited with a non-zero status."""

    def __init__(
        self,
        command: List[str],
        cwd: Optional[Union[str, Path]],
        returncode: int,
        stderr: str = "",
    ):
        self.command = [str(c) for c in command]
        self.cwd = cwd
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        self.msg = (
            f"Command failed with exit code {returncode}"
            f"\nRan command: `{' '.join(self.command)}`"
            f"\ncwd: `{cwd}`"
        )
        if self.stderr:
            self.msg += f"\nError message: {self.stderr}"
        super().__init__(self.msg)
