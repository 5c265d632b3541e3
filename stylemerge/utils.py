"""Utility helpers for filesystem access and path handling."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .text import Messages


def find_node_modules(start: Path | str) -> list[str]:
    """Return every ``node_modules`` directory from *start* up to the filesystem root."""
    start_path = Path(start).expanduser().absolute()
    if not start_path.is_dir():
        start_path = start_path.parent
    found: list[str] = []
    for candidate in (start_path,) + tuple(start_path.parents):
        directory = candidate / "node_modules"
        if directory.is_dir():
            found.append(str(directory))
    return found


def ensure_str_sequence(values: object, field: str) -> tuple[str, ...]:
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise ValueError(Messages.ERROR_SEQUENCE_INVALID.format(field=field))
    items = tuple(values)
    if any(not isinstance(item, str) for item in items):
        raise ValueError(Messages.ERROR_SEQUENCE_INVALID.format(field=field))
    return items


def ensure_positive(value: float, name: str) -> None:
    if value <= 0:
        raise ValueError(Messages.ERROR_POSITIVE.format(name=name))


def format_path(path: Path | str, base: Path | None = None) -> str:
    """Return a user friendly representation of *path* relative to *base* when possible."""
    path = Path(path)
    if base is not None:
        try:
            relative = path.relative_to(base)
            if str(relative) == ".":
                return str(base)
            return f"./{relative.as_posix()}"
        except ValueError:
            return str(path)
    return str(path)


def plural(count: int) -> str:
    return "" if count == 1 else "s"
