from __future__ import annotations

from typing import Callable

AFFIRMATIVE = frozenset({"y", "yes"})

ConfirmFn = Callable[[str], bool]


def confirm(prompt: str, *, input_fn: Callable[[str], str] = input) -> bool:
    """Ask a yes/no question; only y/yes (any case) counts as yes."""

    try:
        response = input_fn(f"{prompt} [y/N]: ")
    except EOFError:
        return False
    return response.strip().lower() in AFFIRMATIVE
