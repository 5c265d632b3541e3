"""Diagnostics for the `doctor` command."""

from __future__ import annotations

import json
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import DEFAULT_BINARY_NAME, config_file_path
from ..text import Messages


@dataclass
class DoctorCheckResult:
    """Result of a single doctor check."""

    name: str
    passed: bool
    message: str
    detail: str | None = None


def find_command_on_path(command: str) -> Optional[str]:
    """Return the resolved path for *command* if present on PATH."""

    return shutil.which(command)


def check_command_on_path() -> DoctorCheckResult:
    """Check if the stylemerge command is available on PATH."""
    path = find_command_on_path("stylemerge")
    if path:
        return DoctorCheckResult(
            name="Command",
            passed=True,
            message=Messages.DOCTOR_CMD_FOUND.format(path=path),
        )
    # running through `python -m` still works
    return DoctorCheckResult(
        name="Command",
        passed=True,
        message=Messages.DOCTOR_CMD_MISSING,
    )


def resolve_converter_binary(binary: str | None) -> Optional[str]:
    candidate = binary or DEFAULT_BINARY_NAME
    if Path(candidate).expanduser().is_file():
        return str(Path(candidate).expanduser())
    return find_command_on_path(candidate)


def check_converter_binary(binary: str | None) -> DoctorCheckResult:
    path = resolve_converter_binary(binary)
    if path:
        return DoctorCheckResult(
            name="Converter",
            passed=True,
            message=Messages.DOCTOR_BINARY_FOUND.format(path=path),
        )
    return DoctorCheckResult(
        name="Converter",
        passed=False,
        message=Messages.DOCTOR_BINARY_MISSING.format(binary=binary or DEFAULT_BINARY_NAME),
        detail=Messages.ERROR_BINARY_MISSING,
    )


def check_converter_runs(binary: str, *, timeout: float = 10.0) -> DoctorCheckResult:
    """Run ``<binary> --version`` and report the first output line."""
    try:
        completed = subprocess.run(
            [binary, "--version"],
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        return DoctorCheckResult(
            name="Converter run",
            passed=False,
            message=Messages.DOCTOR_BINARY_FAILS,
            detail=str(exc),
        )
    if completed.returncode != 0:
        return DoctorCheckResult(
            name="Converter run",
            passed=False,
            message=Messages.DOCTOR_BINARY_FAILS,
            detail=(completed.stderr or "").strip() or f"exit code {completed.returncode}",
        )
    version = (completed.stdout or "").strip().splitlines()
    return DoctorCheckResult(
        name="Converter run",
        passed=True,
        message=Messages.DOCTOR_BINARY_RUNS.format(version=version[0] if version else "unknown"),
    )


def check_config_file() -> DoctorCheckResult:
    """Check that the config file, when present, holds a JSON object."""
    path = config_file_path()
    if not path.exists():
        return DoctorCheckResult(
            name="Config",
            passed=True,
            message=Messages.DOCTOR_CONFIG_MISSING,
            detail=str(path),
        )
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
        return DoctorCheckResult(
            name="Config",
            passed=False,
            message=Messages.DOCTOR_CONFIG_INVALID.format(path=path),
            detail=str(exc),
        )
    if not isinstance(data, dict):
        return DoctorCheckResult(
            name="Config",
            passed=False,
            message=Messages.DOCTOR_CONFIG_INVALID.format(path=path),
            detail=Messages.ERROR_CONFIG_JSON_INVALID,
        )
    return DoctorCheckResult(
        name="Config",
        passed=True,
        message=Messages.DOCTOR_CONFIG_OK.format(path=path),
    )


def run_all_doctor_checks(binary: str | None) -> list[DoctorCheckResult]:
    """Run all doctor checks and return results."""
    results = [
        check_command_on_path(),
        check_config_file(),
        check_converter_binary(binary),
    ]
    resolved = resolve_converter_binary(binary)
    if resolved:
        results.append(check_converter_runs(resolved))
    return results
