"""Stylesheet syntax variants."""

from __future__ import annotations

import os
from enum import Enum

from .errors import UnknownSyntaxError
from .text import Messages


class Syntax(str, Enum):
    INDENTED = "sass"
    NESTED = "scss"
    PLAIN = "css"


TARGET_SYNTAXES: tuple[Syntax, ...] = (Syntax.NESTED, Syntax.INDENTED)


def determine_syntax(path: str) -> Syntax:
    """Return the native syntax implied by the extension of *path*."""
    suffix = os.path.splitext(path)[1].lower().lstrip(".")
    try:
        return Syntax(suffix)
    except ValueError as exc:
        raise UnknownSyntaxError(path) from exc


def parse_target(value: str | Syntax) -> Syntax:
    """Return the output syntax for *value*; plain CSS cannot be a target."""
    raw = value.value if isinstance(value, Syntax) else str(value or "")
    try:
        syntax = Syntax(raw.strip().lower())
    except ValueError as exc:
        raise ValueError(Messages.ERROR_TARGET_INVALID.format(value=value)) from exc
    if syntax not in TARGET_SYNTAXES:
        raise ValueError(Messages.ERROR_TARGET_INVALID.format(value=value))
    return syntax
