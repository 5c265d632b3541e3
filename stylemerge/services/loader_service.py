"""Breadth-first loading of the ``@import`` graph of a stylesheet."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, MutableMapping

from loguru import logger

from ..directives import rewrite_imports
from ..errors import StyleMergeError
from ..filters import remove_comments, remove_unnecessary_whitespaces
from ..models import BuildGraph, FileRecord
from ..resolver import PathResolver
from ..syntax import determine_syntax
from .url_service import UrlResolver, rewrite_urls

FileReader = Callable[[str], str]


@dataclass(slots=True)
class LoaderOptions:
    remove_comments: bool = True
    remove_unnecessary_whitespaces: bool = True
    resolve_root_relative_urls: bool = False
    encoding: str = "utf-8"


class SourceLoader:
    """Read a stylesheet from disk and normalize it for caching.

    URL references are rewritten first (when a URL resolver is configured),
    then import specifiers are replaced with quoted absolute paths, then
    comments and blank lines are stripped.
    """

    def __init__(
        self,
        path_resolver: PathResolver,
        *,
        options: LoaderOptions | None = None,
        url_resolver: UrlResolver | None = None,
        reader: FileReader | None = None,
    ) -> None:
        self.path_resolver = path_resolver
        self.options = options or LoaderOptions()
        self.url_resolver = url_resolver
        self._reader = reader or self._read_from_disk

    def _read_from_disk(self, path: str) -> str:
        with open(path, encoding=self.options.encoding) as handle:
            return handle.read()

    def read(self, path: str) -> str:
        syntax = determine_syntax(path)
        content = self._reader(path)
        if self.url_resolver is not None:
            content = rewrite_urls(
                content,
                path,
                url_resolver=self.url_resolver,
                path_resolver=self.path_resolver,
                resolve_root_relative=self.options.resolve_root_relative_urls,
            )
        content = rewrite_imports(
            content,
            syntax,
            lambda specifier: self.path_resolver.resolve(specifier, path),
        )
        if self.options.remove_comments:
            content = remove_comments(content, syntax)
        if self.options.remove_unnecessary_whitespaces:
            content = remove_unnecessary_whitespaces(content, syntax)
        return content

    def get_file(
        self,
        path: str,
        build_marker: int,
        cache: MutableMapping[str, FileRecord],
    ) -> FileRecord:
        """Return the cached record for *path*, replacing it when the source changed."""
        content = self.read(path)
        cached = cache.get(path)
        if cached is not None and cached.original() == content:
            logger.debug("Reusing cached {}", path)
            return cached
        record = FileRecord(path, content, build_marker)
        cache[path] = record
        logger.debug("Loaded {} ({} syntax)", path, record.native_syntax.value)
        return record


def load_graph(
    root_path: str,
    build_marker: int,
    cache: MutableMapping[str, FileRecord] | None,
    *,
    loader: SourceLoader,
) -> BuildGraph:
    """Load *root_path* and every file it transitively imports.

    Each path is read once per build. Failures carry the paths visited so far
    in ``touched_files``.
    """
    cache = cache if cache is not None else {}
    files: dict[str, FileRecord] = {}
    queued: deque[str] = deque([root_path])
    seen: set[str] = {root_path}

    try:
        while queued:
            record = loader.get_file(queued.popleft(), build_marker, cache)
            files[record.path] = record
            for dependency in record.imports():
                if dependency.target_path in seen:
                    continue
                seen.add(dependency.target_path)
                queued.append(dependency.target_path)
    except StyleMergeError as exc:
        exc.attach_touched_files(seen)
        raise
    except (OSError, UnicodeDecodeError) as exc:
        error = StyleMergeError(str(exc))
        error.attach_touched_files(seen)
        raise error from exc

    logger.debug("Loaded {} file(s) from {}", len(files), root_path)
    return BuildGraph(root=files[root_path], files=files)
