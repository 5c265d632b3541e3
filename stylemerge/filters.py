"""Regex based text passes applied to stylesheet sources.

None of these passes parse the stylesheet. They rely on pattern matching and
may misbehave on unusual input, e.g. ``//`` inside a quoted string outside of
``url(...)`` is treated as a comment.
"""

from __future__ import annotations

import re

from .syntax import Syntax

MAX_BLOCK_DEPTH = 30

_LINE_COMMENT_RE = re.compile(
    r"(?:(url)\(\s*['\"]?(?:[a-z]+:)?)?//[^\n]*",
    re.IGNORECASE,
)
_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_COMMENT_SCAN_RE = re.compile(
    r"""(?P<string>"(?:\\.|[^"\\\n])*"|'(?:\\.|[^'\\\n])*')"""
    r"""|(?P<url>url\([^)\n]*\))"""
    r"""|(?P<comment>//[^\n]*|/\*.*?\*/)""",
    re.DOTALL | re.IGNORECASE,
)
_BLANK_LINES_RE = re.compile(r"\r?\n(?:[\t\r ]*?\n)+")
_LEADING_WHITESPACE_RE = re.compile(r"(^|\n)\s+")
_DECLARATION_RE = re.compile(
    r"@(mixin|function)\s+([\w-]+)\s*(?:\([^)]+\))?\s*\{",
    re.IGNORECASE,
)
_DEFAULT_VARIABLE_RE = re.compile(
    r"(\$[a-zA-Z0-9_-]+):\s*([^;]+?)\s*!default\s*(?:;|(?=\})|\Z)"
)


def remove_comments(content: str, syntax: Syntax) -> str:
    """Strip ``//`` line comments and ``/* */`` block comments."""

    def _line_comment(match: re.Match[str]) -> str:
        return match.group(0) if match.group(1) else ""

    content = _LINE_COMMENT_RE.sub(_line_comment, content)
    return _BLOCK_COMMENT_RE.sub("", content)


def comment_spans(content: str) -> list[tuple[int, int]]:
    """Return the ``(start, end)`` offsets of every comment in *content*.

    Quoted strings and ``url(...)`` are skipped, so ``//`` inside them does not
    start a comment.
    """
    return [
        match.span("comment")
        for match in _COMMENT_SCAN_RE.finditer(content)
        if match.group("comment") is not None
    ]


def remove_unnecessary_whitespaces(content: str, syntax: Syntax) -> str:
    """Collapse blank line runs; brace syntaxes also lose line indentation."""
    content = _BLANK_LINES_RE.sub("\n", content)
    if syntax in (Syntax.NESTED, Syntax.PLAIN):
        content = _LEADING_WHITESPACE_RE.sub(r"\1", content)
    return content


def _block_end(content: str, open_index: int) -> int | None:
    depth = 0
    for index in range(open_index, len(content)):
        char = content[index]
        if char == "{":
            depth += 1
            if depth > MAX_BLOCK_DEPTH:
                return None
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return None


def remove_redundant_functions_and_mixins(content: str, syntax: Syntax) -> str:
    """Drop ``@mixin``/``@function`` blocks repeating the previous definition.

    A block is removed only when it is byte-identical to the last kept block
    with the same kind and name, so redefinitions in between stay effective.
    Only the nested (SCSS) syntax is handled.
    """
    if syntax != Syntax.NESTED:
        return content

    latest: dict[tuple[str, str], str] = {}
    pieces: list[str] = []
    cursor = 0
    position = 0
    while True:
        match = _DECLARATION_RE.search(content, position)
        if match is None:
            break
        end = _block_end(content, match.end() - 1)
        if end is None:
            position = match.end()
            continue
        block = content[match.start() : end]
        key = (match.group(1).lower(), match.group(2))
        if latest.get(key) == block:
            pieces.append(content[cursor : match.start()])
            cursor = end
        else:
            latest[key] = block
        position = end
    pieces.append(content[cursor:])
    return "".join(pieces)


def remove_redundant_variables(content: str, syntax: Syntax) -> str:
    """Keep only the first ``!default`` assignment of every variable.

    Scopes are ignored: a ``!default`` inside a mixin counts as global.
    """
    seen: set[str] = set()

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in seen:
            return ""
        seen.add(name)
        return match.group(0)

    return _DEFAULT_VARIABLE_RE.sub(_replace, content)
