"""Interactive prompts. `ask` is injectable so callers and tests can script answers."""

import sys
from typing import Callable, Sequence

Ask = Callable[[str], str]


def is_interactive() -> bool:
    return sys.stdin.isatty()


def confirm(question: str, default: bool = False, ask: Ask = input) -> bool:
    """Ask a yes/no question. EOF (no terminal) returns the default."""
    suffix = " [Y/n] " if default else " [y/N] "
    try:
        answer = ask(question + suffix).strip().lower()
    except EOFError:
        return default
    if not answer:
        return default
    return answer in ("y", "yes")


def choose(question: str, options: Sequence[str], default: int = 1, ask: Ask = input) -> int:
    """
    Numbered menu. Returns the 1-based choice.

    Invalid input re-prompts; EOF returns the default.
    """
    lines = [question] + [f"  {i}. {opt}" for i, opt in enumerate(options, 1)]
    prompt = "\n".join(lines) + f"\nChoose [1-{len(options)}] ({default}): "
    while True:
        try:
            answer = ask(prompt).strip()
        except EOFError:
            return default
        if not answer:
            return default
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return int(answer)
