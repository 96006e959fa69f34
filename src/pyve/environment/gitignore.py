"""
Managed .gitignore block.

pyve only ever edits the lines between its own markers, so purge can
remove exactly what init added.
"""

from pathlib import Path
from typing import List, Optional, Tuple

from ..config.parser import DIRENV_FILE_NAME, ENV_FILE_NAME, GITIGNORE_FILE_NAME

BLOCK_START = "# >>> pyve >>>"
BLOCK_END = "# <<< pyve <<<"


def get_gitignore_path(project_dir: Path) -> Path:
    return Path(project_dir) / GITIGNORE_FILE_NAME


def gitignore_patterns(venv_dir: str = ".venv") -> List[str]:
    return [
        f"{venv_dir}/",
        ".pyve/envs/",
        ".pyve/testenv/",
        ".pyve/bin/",
        ENV_FILE_NAME,
        DIRENV_FILE_NAME,
        "__pycache__/",
        "*.egg-info/",
    ]


def _find_block(text: str) -> Optional[Tuple[int, int]]:
    """Offsets of the pyve block, from BLOCK_START to the end of the BLOCK_END line."""
    start = None
    offset = 0
    for line in text.splitlines(keepends=True):
        stripped = line.strip()
        if start is None and stripped == BLOCK_START:
            start = offset
        elif start is not None and stripped == BLOCK_END:
            return start, offset + len(line)
        offset += len(line)
    if start is not None:
        return start, len(text)
    return None


def _strip_block(text: str) -> Tuple[str, bool]:
    """Remove the pyve block and the single newline that separates it from user content."""
    span = _find_block(text)
    if span is None:
        return text, False
    start, end = span
    if start > 0 and text[start - 1] == "\n":
        start -= 1
    return text[:start] + text[end:], True


def has_pyve_block(project_dir: Path) -> bool:
    path = get_gitignore_path(project_dir)
    return path.is_file() and _find_block(path.read_text()) is not None


def update_gitignore(project_dir: Path, patterns: List[str]) -> bool:
    """
    Write (or replace) the pyve block at the end of .gitignore.

    Text outside the block is kept byte for byte. Patterns the user already
    ignores outside the block are skipped; if none are left, the file is
    not written.

    Returns:
        True if .gitignore now holds a pyve block.
    """
    path = get_gitignore_path(project_dir)
    text = path.read_text() if path.exists() else ""
    outside, had_block = _strip_block(text)
    user_patterns = {line.strip() for line in outside.splitlines()}

    block = [p for p in patterns if p not in user_patterns and p.rstrip("/") not in user_patterns]
    if not block:
        if had_block:
            path.write_text(outside)
        return False

    rendered = "\n".join([BLOCK_START, *block, BLOCK_END]) + "\n"
    new_text = f"{outside}\n{rendered}" if outside else rendered
    if new_text != text:
        path.write_text(new_text)
    return True


def remove_gitignore_block(project_dir: Path, delete_if_empty: bool = True) -> bool:
    """
    Remove the pyve block, restoring .gitignore to its content before init.

    Args:
        project_dir: Project root.
        delete_if_empty: Delete .gitignore when nothing but the block was in it.

    Returns:
        True if a block was removed.
    """
    path = get_gitignore_path(project_dir)
    if not path.is_file():
        return False

    remaining, removed = _strip_block(path.read_text())
    if not removed:
        return False
    if remaining or not delete_if_empty:
        path.write_text(remaining)
    else:
        path.unlink()
    return True
