"""In-memory representation of stylesheet files across syntax variants."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import MutableMapping

from .directives import ImportRef, parse_imports
from .syntax import Syntax, determine_syntax

_BUILD_MARKERS = itertools.count(1)


def next_build_marker() -> int:
    """Return a process-wide, strictly increasing build marker."""
    return next(_BUILD_MARKERS)


@dataclass(slots=True)
class ContentSlot:
    original: str | None = None
    final: str | None = None
    imports: list[ImportRef] | None = None


class FileRecord:
    """Cached content of one stylesheet in every syntax it has been seen in.

    ``original`` is the preprocessed source (imports rewritten to absolute
    paths), ``final`` the assembled output with imports inlined. Writing an
    ``original`` invalidates the ``final`` and import list of that syntax.
    """

    __slots__ = ("path", "native_syntax", "content", "last_updated")

    def __init__(self, path: str, content: str, build_marker: int) -> None:
        self.path = path
        self.native_syntax = determine_syntax(path)
        self.content: dict[Syntax, ContentSlot] = {syntax: ContentSlot() for syntax in Syntax}
        self.last_updated = build_marker
        self.set_original(self.native_syntax, content, build_marker)

    def __repr__(self) -> str:
        return (
            f"FileRecord(path={self.path!r}, native_syntax={self.native_syntax.value!r}, "
            f"last_updated={self.last_updated})"
        )

    def original(self, syntax: Syntax | None = None) -> str | None:
        return self.content[syntax or self.native_syntax].original

    def final(self, syntax: Syntax | None = None) -> str | None:
        return self.content[syntax or self.native_syntax].final

    def has_original(self, syntax: Syntax | None = None) -> bool:
        return self.original(syntax) is not None

    def has_final(self, syntax: Syntax | None = None) -> bool:
        return self.final(syntax) is not None

    def set_original(self, syntax: Syntax, content: str, build_marker: int) -> None:
        if syntax == Syntax.PLAIN:
            # plain CSS is valid SCSS and is never processed further
            for mirrored in (Syntax.PLAIN, Syntax.NESTED):
                slot = self.content[mirrored]
                slot.original = content
                slot.final = content
                slot.imports = []
        else:
            slot = self.content[syntax]
            slot.original = content
            slot.final = None
            slot.imports = None
        self.last_updated = build_marker

    def set_final(self, syntax: Syntax, content: str, build_marker: int) -> None:
        if syntax == Syntax.PLAIN:
            self.content[Syntax.PLAIN].final = content
            self.content[Syntax.NESTED].final = content
        else:
            self.content[syntax].final = content
        self.last_updated = build_marker

    def imports(self, syntax: Syntax | None = None) -> list[ImportRef]:
        """Return the import directives of ``original`` in *syntax* (cached)."""
        if self.native_syntax == Syntax.PLAIN:
            return []
        slot = self.content[syntax or self.native_syntax]
        if slot.imports is not None:
            return slot.imports
        if slot.original is None:
            return []
        slot.imports = parse_imports(slot.original, syntax or self.native_syntax)
        return slot.imports


MergeCache = MutableMapping[str, FileRecord]


@dataclass(slots=True)
class BuildGraph:
    root: FileRecord
    files: dict[str, FileRecord] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BuildResult:
    document: str
    touched_files: frozenset[str]
    converted_files: frozenset[str] = frozenset()
