"""Resolution of import specifiers to absolute file paths."""

from __future__ import annotations

import os
from typing import Sequence

from loguru import logger

from .errors import UnresolvedImportError


class PathResolver:
    """Turn ``@import``/``url()`` specifiers into absolute file paths.

    Local candidates (specifier plus every extension, relative to the referring
    file) are tried first, then every global directory for each global prefix the
    specifier starts with. The first existing file wins.
    """

    def __init__(
        self,
        *,
        extensions: Sequence[str],
        global_directories: Sequence[str],
        global_prefixes: Sequence[str],
        cache_file_paths: bool = True,
    ) -> None:
        self.extensions = tuple(extensions)
        self.global_directories = tuple(os.path.abspath(path) for path in global_directories)
        self.global_prefixes = tuple(global_prefixes)
        self.cache_file_paths = cache_file_paths
        self._cache: dict[tuple[str, str], str | None] = {}

    def resolve(self, specifier: str, referring_file: str | None = None) -> str:
        """Return the absolute path for *specifier* or raise ``UnresolvedImportError``."""
        resolved = self.find(specifier, referring_file)
        if resolved is None:
            referrer = referring_file if referring_file is not None else specifier
            raise UnresolvedImportError(
                specifier,
                referrer,
                self.list_candidates(specifier, referring_file),
            )
        return resolved

    def find(self, specifier: str, referring_file: str | None = None) -> str | None:
        """Return the absolute path for *specifier*, or ``None`` when nothing exists."""
        cwd = os.path.dirname(referring_file if referring_file is not None else specifier)
        if not self.cache_file_paths:
            return self._find(specifier, cwd)
        key = (specifier, cwd)
        if key not in self._cache:
            self._cache[key] = self._find(specifier, cwd)
        return self._cache[key]

    def list_candidates(self, specifier: str, referring_file: str | None = None) -> list[str]:
        """Return every path :meth:`find` would test, in order."""
        cwd = os.path.dirname(referring_file if referring_file is not None else specifier)
        return list(self._iter_candidates(specifier, cwd))

    def clear(self) -> None:
        self._cache = {}

    def _find(self, specifier: str, cwd: str) -> str | None:
        for candidate in self._iter_candidates(specifier, cwd):
            if os.path.isfile(candidate):
                return candidate
        logger.debug("No file found for {!r} from {}", specifier, cwd)
        return None

    def _iter_candidates(self, specifier: str, cwd: str):
        file_names = [specifier + extension for extension in self.extensions]
        for file_name in file_names:
            if os.path.isabs(file_name):
                yield os.path.normpath(file_name)
            else:
                yield os.path.abspath(os.path.join(cwd, file_name))

        for prefix in self.global_prefixes:
            if not specifier.startswith(prefix):
                continue
            global_names = [file_name[len(prefix) :] for file_name in file_names]
            for directory in self.global_directories:
                for file_name in global_names:
                    yield os.path.normpath(os.path.join(directory, file_name))
