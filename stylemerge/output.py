"""Terminal-safe status icons for CLI output."""

from __future__ import annotations

import sys

from rich.console import Console

_CHECK_MARKS = "✓✗"


def _can_encode(text: str, encoding: str | None) -> bool:
    if not encoding:
        return False
    try:
        text.encode(encoding)
    except (LookupError, UnicodeEncodeError):
        return False
    return True


def supports_unicode_output(console: Console | None = None) -> bool:
    if console is not None and _can_encode(_CHECK_MARKS, console.encoding):
        return True
    return _can_encode(_CHECK_MARKS, sys.stdout.encoding)


def format_status_icon(passed: bool, console: Console | None = None) -> str:
    if not supports_unicode_output(console):
        return "[green]OK[/green]" if passed else "[red]X[/red]"
    return "[green]✓[/green]" if passed else "[red]✗[/red]"
