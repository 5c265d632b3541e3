"""Build orchestration: load, convert and assemble one stylesheet."""

from __future__ import annotations

import threading
import time
from typing import MutableMapping

from loguru import logger

from ..errors import BuildAlreadyInProgressError, StyleMergeError
from ..models import BuildResult, FileRecord, next_build_marker
from ..syntax import Syntax
from .assemble_service import AssembleOptions, StalenessTracker, assemble
from .convert_service import Converter, convert_all
from .loader_service import SourceLoader, load_graph
from .url_service import UrlResolver


class Builder:
    """Run merge builds for one root stylesheet, one at a time.

    A second :meth:`build` while one is running fails immediately with
    :class:`BuildAlreadyInProgressError`; callers are never queued.
    """

    def __init__(
        self,
        root_path: str,
        target: Syntax,
        *,
        loader: SourceLoader,
        converter: Converter,
        assemble_options: AssembleOptions | None = None,
        url_resolver: UrlResolver | None = None,
    ) -> None:
        self.root_path = root_path
        self.target = target
        self.loader = loader
        self.converter = converter
        self.assemble_options = assemble_options or AssembleOptions()
        self.url_resolver = url_resolver
        self._busy = threading.Lock()

    @property
    def in_progress(self) -> bool:
        return self._busy.locked()

    def build(self, cache: MutableMapping[str, FileRecord] | None = None) -> BuildResult:
        if not self._busy.acquire(blocking=False):
            raise BuildAlreadyInProgressError()
        try:
            return self._build(cache if cache is not None else {})
        finally:
            self._busy.release()

    def _build(self, cache: MutableMapping[str, FileRecord]) -> BuildResult:
        started = time.perf_counter()
        if self.url_resolver is not None:
            self.url_resolver.reload()

        build_marker = next_build_marker()
        root_path = self.loader.path_resolver.resolve(self.root_path)
        graph = load_graph(root_path, build_marker, cache, loader=self.loader)
        try:
            converted = convert_all(graph.files, self.target, build_marker, self.converter)
            document = assemble(
                self.target,
                graph.root,
                graph.files,
                build_marker,
                options=self.assemble_options,
                staleness=StalenessTracker(self.target, graph.files),
            )
        except StyleMergeError as exc:
            exc.attach_touched_files(graph.files)
            raise

        logger.info(
            "Merged {} file(s) for {} ({} converted) in {:.1f}ms",
            len(graph.files),
            self.root_path,
            len(converted),
            (time.perf_counter() - started) * 1000,
        )
        return BuildResult(
            document=document,
            touched_files=frozenset(graph.files),
            converted_files=frozenset(converted),
        )
