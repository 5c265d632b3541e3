"""Rewriting of ``url(...)`` references to published asset URLs."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping

from loguru import logger

from ..errors import ManifestUnreadableError
from ..resolver import PathResolver
from ..text import Messages

UrlFunction = Callable[[str, str, str], str]

_URL_RE = re.compile(
    r"""url\((?:'((?:[^'\n\\]|\\.)+)'|"((?:[^"\n\\]|\\.)+)"|((?:[^)\r\n\t \\]|\\.)+))\)"""
)
_EXTERNAL_URL_RE = re.compile(r"^(?:(?:http|ftp)s?:)?//", re.IGNORECASE)
_ESCAPE_RE = re.compile(r"\\(.)")


class UrlResolverKind(str, Enum):
    FUNCTION = "function"
    MAPPING = "mapping"
    MANIFEST = "manifest"


@dataclass(slots=True)
class UrlResolver:
    """How local ``url()`` targets are turned into published URLs.

    ``FUNCTION`` calls ``function(absolute_path, stylesheet_path, raw_url)``.
    ``MAPPING`` and ``MANIFEST`` look the absolute path up in a mapping and
    prefix the hit with ``public_path``; a manifest is re-read from disk by
    :meth:`reload` before every build.
    """

    kind: UrlResolverKind
    function: UrlFunction | None = None
    mapping: dict[str, str] = field(default_factory=dict)
    manifest_path: str | None = None
    public_path: str = ""

    @classmethod
    def from_function(cls, function: UrlFunction) -> "UrlResolver":
        return cls(kind=UrlResolverKind.FUNCTION, function=function)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str], public_path: str = "") -> "UrlResolver":
        if not isinstance(public_path, str):
            raise ValueError(Messages.ERROR_PUBLIC_PATH_REQUIRED)
        return cls(kind=UrlResolverKind.MAPPING, mapping=dict(mapping), public_path=public_path)

    @classmethod
    def from_manifest(cls, manifest_path: str | os.PathLike[str], public_path: str = "") -> "UrlResolver":
        if not isinstance(public_path, str):
            raise ValueError(Messages.ERROR_PUBLIC_PATH_REQUIRED)
        return cls(
            kind=UrlResolverKind.MANIFEST,
            manifest_path=os.path.abspath(os.fspath(manifest_path)),
            public_path=public_path,
        )

    def reload(self) -> None:
        """Re-read the manifest file; no-op for other kinds."""
        if self.kind != UrlResolverKind.MANIFEST or self.manifest_path is None:
            return
        try:
            with open(self.manifest_path, encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as exc:
            raise ManifestUnreadableError(self.manifest_path) from exc
        if not isinstance(data, dict):
            raise ManifestUnreadableError(self.manifest_path)
        self.mapping = {str(key): str(value) for key, value in data.items()}
        logger.debug("Loaded {} URL mappings from {}", len(self.mapping), self.manifest_path)

    def resolve(self, file_path: str, stylesheet_path: str, raw_url: str) -> str:
        if self.kind == UrlResolverKind.FUNCTION:
            if self.function is None:
                return file_path
            return self.function(file_path, stylesheet_path, raw_url)
        if self.kind in (UrlResolverKind.MAPPING, UrlResolverKind.MANIFEST):
            mapped = self.mapping.get(file_path)
            return self.public_path + mapped if mapped else self.public_path
        return file_path


def _should_skip(url: str, resolve_root_relative: bool) -> bool:
    if _EXTERNAL_URL_RE.match(url):
        return True
    if url.lower().startswith("data:") or url.startswith("#"):
        return True
    return url.startswith("/") and not resolve_root_relative


def rewrite_urls(
    content: str,
    stylesheet_path: str,
    *,
    url_resolver: UrlResolver,
    path_resolver: PathResolver,
    resolve_root_relative: bool = False,
) -> str:
    """Replace every local ``url(...)`` in *content* with its published URL."""

    def _replace(match: re.Match[str]) -> str:
        raw = match.group(1) or match.group(2) or match.group(3)
        url = _ESCAPE_RE.sub(r"\1", raw)
        if _should_skip(url, resolve_root_relative):
            return match.group(0)
        absolute_path = path_resolver.find(url, stylesheet_path) or os.path.abspath(
            os.path.join(os.path.dirname(stylesheet_path), url)
        )
        published = url_resolver.resolve(absolute_path, stylesheet_path, url)
        return 'url("' + published.replace('"', '\\"') + '")'

    return _URL_RE.sub(_replace, content)
