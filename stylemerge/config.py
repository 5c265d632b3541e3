"""Global configuration management for stylemerge."""

from __future__ import annotations

import json
import os
from contextlib import contextmanager
from contextvars import ContextVar
from collections.abc import Mapping
import dataclasses
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

from .syntax import parse_target
from .text import Messages

DEFAULT_CONFIG_DIR = Path(os.path.expanduser("~")) / ".stylemerge"
CONFIG_DIR = DEFAULT_CONFIG_DIR
CONFIG_FILE = CONFIG_DIR / "config.json"
_CONFIG_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "stylemerge_config_dir_override",
    default=None,
)
DEFAULT_BINARY_NAME = "sass-convert"
DEFAULT_TARGET = "scss"
DEFAULT_EXTENSIONS: tuple[str, ...] = (
    "",
    ".scss",
    ".sass",
    ".css",
    "/index.scss",
    "/index.sass",
    "/index.css",
)
DEFAULT_GLOBAL_PREFIXES: tuple[str, ...] = ("", "~")
DEFAULT_MAX_OUTPUT = 500 * 1024
DEFAULT_CONVERT_TIMEOUT = 60.0
DEFAULT_ENCODING = "utf-8"


@dataclass
class Config:
    binary: str | None = None
    target: str = DEFAULT_TARGET
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    global_directories: tuple[str, ...] | None = None
    global_prefixes: tuple[str, ...] = DEFAULT_GLOBAL_PREFIXES
    max_output: int = DEFAULT_MAX_OUTPUT
    convert_timeout: float = DEFAULT_CONVERT_TIMEOUT
    cache_file_paths: bool = True
    use_polling: bool = False
    remove_comments: bool = True
    remove_unnecessary_whitespaces: bool = True
    optimize_redundant_variables: bool = False
    optimize_redundant_functions_and_mixins: bool = False
    manifest: str | None = None
    public_path: str = ""
    resolve_root_relative_urls: bool = False
    encoding: str = DEFAULT_ENCODING


def _resolve_config_dir() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    return override if override is not None else CONFIG_DIR


def _resolve_config_file() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    if override is not None:
        return override / "config.json"
    return CONFIG_FILE


def config_file_path() -> Path:
    return _resolve_config_file()


@contextmanager
def config_dir_context(path: Path | str | None):
    """Temporarily override the config directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CONFIG_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CONFIG_DIR_OVERRIDE.reset(token)


def set_config_dir(path: Path | str | None) -> None:
    global CONFIG_DIR, CONFIG_FILE
    if path is None:
        CONFIG_DIR = DEFAULT_CONFIG_DIR
    else:
        dir_path = Path(path).expanduser().resolve()
        if dir_path.exists() and not dir_path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {dir_path}")
        CONFIG_DIR = dir_path
    CONFIG_FILE = CONFIG_DIR / "config.json"


def load_config() -> Config:
    config_file = _resolve_config_file()
    if not config_file.exists():
        return Config()
    raw = json.loads(config_file.read_text(encoding="utf-8"))
    return config_from_json(raw)


def save_config(config: Config) -> None:
    config_dir = _resolve_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    defaults = Config()
    data: Dict[str, Any] = {}
    for item in fields(Config):
        value = getattr(config, item.name)
        if value == getattr(defaults, item.name):
            continue
        data[item.name] = list(value) if isinstance(value, tuple) else value
    config_file = _resolve_config_file()
    config_file.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def reset_config() -> None:
    config_file = _resolve_config_file()
    if config_file.exists():
        config_file.unlink()


def config_from_json(
    payload: str | Mapping[str, object], *, base: Config | None = None
) -> Config:
    """Return a Config from a JSON string or mapping without saving it."""
    data = _coerce_config_payload(payload)
    config = Config() if base is None else _clone_config(base)
    _apply_config_payload(config, data)
    return config


def update_config_from_json(
    payload: str | Mapping[str, object], *, replace: bool = False
) -> Config:
    """Update config from a JSON string or mapping and persist it."""
    base = None if replace else load_config()
    config = config_from_json(payload, base=base)
    save_config(config)
    return config


def set_binary(value: str | None) -> None:
    config = load_config()
    config.binary = (value or "").strip() or None
    save_config(config)


def set_target(value: str) -> None:
    config = load_config()
    config.target = _normalize_target(value)
    save_config(config)


def set_max_output(value: int) -> None:
    config = load_config()
    config.max_output = _coerce_positive_int(value, "max_output")
    save_config(config)


def set_public_path(value: str | None) -> None:
    config = load_config()
    config.public_path = value or ""
    save_config(config)


def _coerce_config_payload(payload: str | Mapping[str, object]) -> Mapping[str, object]:
    if isinstance(payload, str):
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID) from exc
    elif isinstance(payload, Mapping):
        data = dict(payload)
    else:
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID)
    if not isinstance(data, Mapping):
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID)
    return data


def _clone_config(config: Config) -> Config:
    return dataclasses.replace(config)


def _apply_config_payload(config: Config, payload: Mapping[str, object]) -> None:
    if "binary" in payload:
        config.binary = _coerce_optional_str(payload["binary"], "binary")
    if "target" in payload:
        config.target = _normalize_target(payload["target"])
    if "extensions" in payload:
        config.extensions = _coerce_str_tuple(
            payload["extensions"], "extensions", DEFAULT_EXTENSIONS
        )
    if "global_directories" in payload:
        value = payload["global_directories"]
        config.global_directories = (
            None if value is None else _coerce_str_tuple(value, "global_directories", ())
        )
    if "global_prefixes" in payload:
        config.global_prefixes = _coerce_str_tuple(
            payload["global_prefixes"], "global_prefixes", DEFAULT_GLOBAL_PREFIXES
        )
    if "max_output" in payload:
        config.max_output = _coerce_positive_int(payload["max_output"], "max_output")
    if "convert_timeout" in payload:
        config.convert_timeout = _coerce_positive_float(
            payload["convert_timeout"], "convert_timeout"
        )
    for flag in (
        "cache_file_paths",
        "use_polling",
        "remove_comments",
        "remove_unnecessary_whitespaces",
        "optimize_redundant_variables",
        "optimize_redundant_functions_and_mixins",
        "resolve_root_relative_urls",
    ):
        if flag in payload:
            setattr(config, flag, _coerce_bool(payload[flag], flag))
    if "manifest" in payload:
        config.manifest = _coerce_optional_str(payload["manifest"], "manifest")
    if "public_path" in payload:
        config.public_path = _coerce_optional_str(payload["public_path"], "public_path") or ""
    if "encoding" in payload:
        config.encoding = (
            _coerce_optional_str(payload["encoding"], "encoding") or DEFAULT_ENCODING
        )


def _normalize_target(value: object) -> str:
    if value is None:
        return DEFAULT_TARGET
    if not isinstance(value, str):
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field="target"))
    return parse_target(value.strip() or DEFAULT_TARGET).value


def _coerce_optional_str(value: object, field: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        cleaned = value.strip()
        return cleaned or None
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_str_tuple(value: object, field: str, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        return tuple(value)
    raise ValueError(Messages.ERROR_SEQUENCE_INVALID.format(field=field))


def _coerce_positive_int(value: object, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as exc:
            raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field)) from exc
    if isinstance(value, int) and value > 0:
        return value
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_positive_float(value: object, field: str) -> float:
    if isinstance(value, bool):
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError as exc:
            raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field)) from exc
    if isinstance(value, (int, float)) and value > 0:
        return float(value)
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_bool(value: object, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        cleaned = value.strip().lower()
        if cleaned in {"true", "1", "yes", "on"}:
            return True
        if cleaned in {"false", "0", "no", "off"}:
            return False
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
