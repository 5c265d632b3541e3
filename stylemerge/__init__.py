"""stylemerge package initialization."""

from __future__ import annotations

from .api import StyleMerge, merge
from .config import Config, config_dir_context, config_from_json, set_config_dir
from .errors import (
    BuildAlreadyInProgressError,
    CircularImportError,
    ConversionFailedError,
    ManifestUnreadableError,
    OutputTooLargeError,
    StyleMergeError,
    UnknownSyntaxError,
    UnresolvedImportError,
)
from .services.url_service import UrlResolver
from .syntax import Syntax

__all__ = [
    "__version__",
    "BuildAlreadyInProgressError",
    "CircularImportError",
    "Config",
    "ConversionFailedError",
    "ManifestUnreadableError",
    "OutputTooLargeError",
    "StyleMerge",
    "StyleMergeError",
    "Syntax",
    "UnknownSyntaxError",
    "UnresolvedImportError",
    "UrlResolver",
    "config_dir_context",
    "config_from_json",
    "get_version",
    "merge",
    "set_config_dir",
]

__version__ = "0.3.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
