"""Detection and rewriting of ``@import`` directives."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterator

from .filters import comment_spans
from .syntax import Syntax

_NESTED_IMPORT_RE = re.compile(
    r"""@import\s+(?P<spec>'(?:\\.|[^'\\])+'|"(?:\\.|[^"\\])+")\s*(?:;[\t ]*|(?=\})|\Z)"""
)
_INDENTED_IMPORT_RE = re.compile(
    r"""^(?P<indent>[\t ]*)@import\s+(?P<spec>'(?:\\.|[^'\\])+'|"(?:\\.|[^"\\])+"|[^\n]+?)[\t ]*$""",
    re.MULTILINE,
)
_ESCAPE_RE = re.compile(r"\\(.)")
_EXTERNAL_PREFIXES = ("url(", "http://", "https://", "//")


@dataclass(frozen=True, slots=True)
class ImportRef:
    target_path: str
    span_start: int
    span_end: int
    indent_prefix: str = ""


def _pattern_for(syntax: Syntax) -> re.Pattern[str]:
    return _INDENTED_IMPORT_RE if syntax == Syntax.INDENTED else _NESTED_IMPORT_RE


def _unquote(spec: str) -> str:
    if spec[:1] in ("'", '"'):
        spec = spec[1:-1]
    return _ESCAPE_RE.sub(r"\1", spec)


def quote_path(path: str) -> str:
    escaped = path.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def is_external_import(specifier: str) -> bool:
    return specifier.lower().startswith(_EXTERNAL_PREFIXES)


def _iter_directives(content: str, syntax: Syntax) -> Iterator[tuple[re.Match[str], str]]:
    comments = comment_spans(content)
    for match in _pattern_for(syntax).finditer(content):
        if any(start <= match.start() < end for start, end in comments):
            continue
        specifier = _unquote(match.group("spec"))
        if is_external_import(specifier):
            continue
        yield match, specifier


def parse_imports(content: str, syntax: Syntax) -> list[ImportRef]:
    """Return the import directives of *content* in source order.

    Plain CSS imports are never followed.
    """
    if syntax == Syntax.PLAIN:
        return []
    imports: list[ImportRef] = []
    for match, specifier in _iter_directives(content, syntax):
        indent = match.groupdict().get("indent") or ""
        imports.append(
            ImportRef(
                target_path=specifier,
                span_start=match.start() + len(indent),
                span_end=match.end(),
                indent_prefix=indent,
            )
        )
    return imports


def rewrite_imports(
    content: str,
    syntax: Syntax,
    resolve: Callable[[str], str],
) -> str:
    """Replace every import specifier with the quoted path returned by *resolve*."""
    if syntax == Syntax.PLAIN:
        return content
    pieces: list[str] = []
    cursor = 0
    for match, specifier in _iter_directives(content, syntax):
        start, end = match.span("spec")
        pieces.append(content[cursor:start])
        pieces.append(quote_path(resolve(specifier)))
        cursor = end
    pieces.append(content[cursor:])
    return "".join(pieces)
