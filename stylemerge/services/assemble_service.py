"""Recursive inlining of imports into the final stylesheet."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Sequence

from loguru import logger

from ..errors import CircularImportError, StyleMergeError
from ..filters import (
    remove_redundant_functions_and_mixins,
    remove_redundant_variables,
    remove_unnecessary_whitespaces,
)
from ..models import FileRecord
from ..syntax import Syntax
from ..text import Messages

_LINE_BREAKS_RE = re.compile(r"\n(?:[\t\r ]*\n)*")


@dataclass(slots=True)
class AssembleOptions:
    remove_unnecessary_whitespaces: bool = True
    optimize_redundant_variables: bool = False
    optimize_redundant_functions_and_mixins: bool = False


def _dependency(files: Mapping[str, FileRecord], path: str, referrer: FileRecord) -> FileRecord:
    record = files.get(path)
    if record is None:
        raise StyleMergeError(
            Messages.ERROR_MISSING_FROM_GRAPH.format(path=path, referrer=referrer.path)
        )
    return record


class StalenessTracker:
    """Per-build memo of which records must be re-assembled.

    A record is stale when it has no final content, or one of its imports is
    newer, has no final content, or is stale itself. Cycles are reported as
    :class:`CircularImportError` instead of recursing forever.
    """

    def __init__(self, target: Syntax, files: Mapping[str, FileRecord]) -> None:
        self.target = target
        self.files = files
        self._memo: dict[str, bool] = {}

    def needs_rebuild(self, record: FileRecord) -> bool:
        return self._check(record, [])

    def mark_built(self, record: FileRecord) -> None:
        self._memo[record.path] = False

    def _check(self, record: FileRecord, visiting: list[str]) -> bool:
        if record.path in self._memo:
            return self._memo[record.path]
        if record.path in visiting:
            raise CircularImportError(visiting + [record.path])
        if not record.has_final(self.target):
            self._memo[record.path] = True
            return True

        visiting.append(record.path)
        try:
            stale = False
            for dependency in record.imports(self.target):
                imported = self.files.get(dependency.target_path)
                if (
                    imported is None
                    or imported.last_updated > record.last_updated
                    or not imported.has_final(self.target)
                    or self._check(imported, visiting)
                ):
                    stale = True
                    break
        finally:
            visiting.pop()
        self._memo[record.path] = stale
        return stale


def reindent(content: str, indent_prefix: str) -> str:
    """Indent every line after the first with *indent_prefix* (indented syntax)."""
    if not indent_prefix:
        return content
    return _LINE_BREAKS_RE.sub("\n" + indent_prefix, content.strip("\n"))


def optimize(content: str, target: Syntax, options: AssembleOptions) -> str:
    if options.remove_unnecessary_whitespaces:
        content = remove_unnecessary_whitespaces(content, target)
    if options.optimize_redundant_functions_and_mixins:
        content = remove_redundant_functions_and_mixins(content, target)
    if options.optimize_redundant_variables:
        content = remove_redundant_variables(content, target)
    if options.remove_unnecessary_whitespaces:
        content = remove_unnecessary_whitespaces(content, target)
    return content


def assemble(
    target: Syntax,
    record: FileRecord,
    files: Mapping[str, FileRecord],
    build_marker: int,
    import_chain: Sequence[str] = (),
    *,
    options: AssembleOptions | None = None,
    staleness: StalenessTracker | None = None,
) -> str:
    """Return *record* in *target* syntax with every import inlined."""
    if record.path in import_chain:
        raise CircularImportError(list(import_chain) + [record.path])

    options = options or AssembleOptions()
    staleness = staleness or StalenessTracker(target, files)

    cached = record.final(target)
    if cached is not None and not staleness.needs_rebuild(record):
        logger.debug("Using cached output of {}", record.path)
        return cached

    content = record.original(target)
    if content is None:
        raise StyleMergeError(
            Messages.ERROR_MISSING_FROM_GRAPH.format(path=record.path, referrer=record.path)
        )

    chain = list(import_chain) + [record.path]
    # splice from the end so earlier offsets stay valid
    for dependency in reversed(record.imports(target)):
        imported = _dependency(files, dependency.target_path, record)
        partial = assemble(
            target,
            imported,
            files,
            build_marker,
            chain,
            options=options,
            staleness=staleness,
        )
        if target == Syntax.INDENTED:
            partial = reindent(partial, dependency.indent_prefix)
        content = content[: dependency.span_start] + partial + content[dependency.span_end :]

    content = optimize(content, target, options)
    record.set_final(target, content, build_marker)
    staleness.mark_built(record)
    return content
