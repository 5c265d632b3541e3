"""Error types raised by the merge engine."""

from __future__ import annotations

from typing import Iterable, Sequence

from .text import Messages


class StyleMergeError(RuntimeError):
    """Base class for every failure of a merge build.

    ``touched_files`` holds the files the failed build read (or tried to read),
    so a watcher can keep watching them until the next change.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.touched_files: frozenset[str] = frozenset()

    def attach_touched_files(self, paths: Iterable[str]) -> None:
        self.touched_files = self.touched_files | frozenset(paths)


class UnknownSyntaxError(StyleMergeError):
    def __init__(self, path: str) -> None:
        super().__init__(Messages.ERROR_UNKNOWN_SYNTAX.format(path=path))
        self.path = path


class UnresolvedImportError(StyleMergeError):
    def __init__(self, specifier: str, referrer: str, candidates: Sequence[str]) -> None:
        super().__init__(
            Messages.ERROR_UNRESOLVED_IMPORT.format(specifier=specifier, referrer=referrer)
        )
        self.specifier = specifier
        self.referrer = referrer
        self.candidates = tuple(candidates)
        # creating any candidate should trigger a rebuild
        self.attach_touched_files(self.candidates)


class CircularImportError(StyleMergeError):
    def __init__(self, chain: Sequence[str]) -> None:
        lines = list(reversed(chain))
        rendered = "\n".join(
            ("⇢ " if index == 0 else "⇡ ") + path for index, path in enumerate(lines)
        )
        super().__init__(Messages.ERROR_CIRCULAR_IMPORT.format(chain=rendered))
        self.chain = tuple(chain)


class ConversionFailedError(StyleMergeError):
    def __init__(self, detail: str) -> None:
        super().__init__(Messages.ERROR_CONVERSION_FAILED.format(detail=detail))
        self.detail = detail


class OutputTooLargeError(StyleMergeError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(Messages.ERROR_OUTPUT_TOO_LARGE.format(size=size, limit=limit))
        self.size = size
        self.limit = limit


class ManifestUnreadableError(StyleMergeError):
    def __init__(self, path: str) -> None:
        super().__init__(Messages.ERROR_MANIFEST_UNREADABLE.format(path=path))
        self.path = path


class BuildAlreadyInProgressError(StyleMergeError):
    def __init__(self) -> None:
        super().__init__(Messages.ERROR_BUILD_IN_PROGRESS)
