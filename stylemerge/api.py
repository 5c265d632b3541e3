"""Public Python API for stylemerge."""

from __future__ import annotations

import os
import shutil
from collections.abc import Mapping
from pathlib import Path

from .config import DEFAULT_BINARY_NAME, Config, config_from_json, load_config
from .models import BuildResult, MergeCache
from .resolver import PathResolver
from .services.assemble_service import AssembleOptions
from .services.build_service import Builder
from .services.convert_service import Converter, SassConvertConverter
from .services.loader_service import LoaderOptions, SourceLoader
from .services.url_service import UrlResolver
from .services.watch_service import ErrorCallback, ReadyCallback, StyleWatcher
from .syntax import parse_target
from .text import Messages
from .utils import ensure_positive, ensure_str_sequence, find_node_modules


class StyleMerge:
    """A merge session for one input stylesheet.

    The session owns the path resolver (and its lookup cache) plus a
    :class:`Builder`. Pass the same ``cache`` mapping to consecutive
    :meth:`build` calls to reuse unchanged files and skip conversions.
    """

    def __init__(
        self,
        input_path: Path | str,
        config: Config | None = None,
        *,
        url_resolver: UrlResolver | None = None,
        converter: Converter | None = None,
    ) -> None:
        if not input_path or not str(input_path).strip():
            raise ValueError(Messages.ERROR_INPUT_REQUIRED)
        self.config = config or Config()
        self.input_path = os.path.abspath(os.path.expanduser(str(input_path)))
        self.target = parse_target(self.config.target)

        extensions = ensure_str_sequence(self.config.extensions, "extensions")
        global_prefixes = ensure_str_sequence(self.config.global_prefixes, "global_prefixes")
        if self.config.global_directories is None:
            global_directories = tuple(find_node_modules(self.input_path))
        else:
            global_directories = ensure_str_sequence(
                self.config.global_directories, "global_directories"
            )
        ensure_positive(self.config.max_output, "max_output")
        ensure_positive(self.config.convert_timeout, "convert_timeout")

        if url_resolver is None and self.config.manifest:
            url_resolver = UrlResolver.from_manifest(
                self.config.manifest, self.config.public_path
            )
        self.url_resolver = url_resolver

        if converter is None:
            converter = SassConvertConverter(
                self.config.binary or shutil.which(DEFAULT_BINARY_NAME),
                max_output=self.config.max_output,
                timeout=self.config.convert_timeout,
                encoding=self.config.encoding,
            )
        self.converter = converter

        self.path_resolver = PathResolver(
            extensions=extensions,
            global_directories=global_directories,
            global_prefixes=global_prefixes,
            cache_file_paths=self.config.cache_file_paths,
        )
        self.loader = SourceLoader(
            self.path_resolver,
            options=LoaderOptions(
                remove_comments=self.config.remove_comments,
                remove_unnecessary_whitespaces=self.config.remove_unnecessary_whitespaces,
                resolve_root_relative_urls=self.config.resolve_root_relative_urls,
                encoding=self.config.encoding,
            ),
            url_resolver=self.url_resolver,
        )
        self.assemble_options = AssembleOptions(
            remove_unnecessary_whitespaces=self.config.remove_unnecessary_whitespaces,
            optimize_redundant_variables=self.config.optimize_redundant_variables,
            optimize_redundant_functions_and_mixins=(
                self.config.optimize_redundant_functions_and_mixins
            ),
        )
        self.builder = self._create_builder()

    def _create_builder(self) -> Builder:
        return Builder(
            self.input_path,
            self.target,
            loader=self.loader,
            converter=self.converter,
            assemble_options=self.assemble_options,
            url_resolver=self.url_resolver,
        )

    def build(self, cache: MergeCache | None = None) -> str:
        """Merge the input stylesheet and return the document."""
        return self.build_result(cache).document

    def build_result(self, cache: MergeCache | None = None) -> BuildResult:
        return self.builder.build(cache)

    def create_watcher(
        self,
        *,
        on_start=None,
        on_ready: ReadyCallback | None = None,
        on_error: ErrorCallback | None = None,
        observer=None,
    ) -> StyleWatcher:
        """Return a watcher that rebuilds on change with its own builder and cache."""
        manifest_path = None
        if self.url_resolver is not None:
            manifest_path = self.url_resolver.manifest_path
        return StyleWatcher(
            self._create_builder(),
            manifest_path=manifest_path,
            use_polling=self.config.use_polling,
            on_start=on_start,
            on_ready=on_ready,
            on_error=on_error,
            observer=observer,
        )

    def clean(self) -> None:
        """Forget cached path lookups."""
        self.path_resolver.clear()


def merge(
    input_path: Path | str,
    output_path: Path | str | None = None,
    *,
    config: Config | None = None,
    url_resolver: UrlResolver | None = None,
    converter: Converter | None = None,
    **overrides: object,
) -> str:
    """Merge *input_path* and optionally write the result to *output_path*.

    Keyword overrides use the config field names, e.g. ``target="sass"``.
    """
    base = config if config is not None else load_config()
    effective = config_from_json(overrides, base=base) if overrides else base
    document = StyleMerge(
        input_path,
        effective,
        url_resolver=url_resolver,
        converter=converter,
    ).build()
    if output_path is not None:
        write_output(output_path, document, encoding=effective.encoding)
    return document


def write_output(path: Path | str, document: str, *, encoding: str = "utf-8") -> Path:
    output = Path(path).expanduser()
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document, encoding=encoding)
    return output


def config_overrides(values: Mapping[str, object | None]) -> dict[str, object]:
    """Drop unset CLI options so they do not shadow stored config values."""
    return {key: value for key, value in values.items() if value is not None}
