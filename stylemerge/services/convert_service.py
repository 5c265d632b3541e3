"""Batched syntax conversion through an external ``sass-convert`` process."""

from __future__ import annotations

import re
import subprocess
import uuid
from typing import Mapping, Protocol

from loguru import logger

from ..config import DEFAULT_CONVERT_TIMEOUT, DEFAULT_ENCODING, DEFAULT_MAX_OUTPUT
from ..errors import ConversionFailedError, OutputTooLargeError
from ..models import FileRecord
from ..syntax import Syntax
from ..text import Messages


class Converter(Protocol):
    def __call__(self, content: str, from_syntax: Syntax, to_syntax: Syntax) -> str:
        ...


class SassConvertConverter:
    """Run ``<binary> --from X --to Y --stdin`` with the content on stdin."""

    def __init__(
        self,
        binary: str | None,
        *,
        max_output: int = DEFAULT_MAX_OUTPUT,
        timeout: float = DEFAULT_CONVERT_TIMEOUT,
        encoding: str = DEFAULT_ENCODING,
    ) -> None:
        self.binary = binary
        self.max_output = max_output
        self.timeout = timeout
        self.encoding = encoding

    def __call__(self, content: str, from_syntax: Syntax, to_syntax: Syntax) -> str:
        if not self.binary:
            raise ConversionFailedError(Messages.ERROR_BINARY_MISSING)
        args = [self.binary, "--from", from_syntax.value, "--to", to_syntax.value, "--stdin"]
        try:
            completed = subprocess.run(
                args,
                input=content.encode(self.encoding),
                capture_output=True,
                check=False,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise ConversionFailedError(str(exc)) from exc
        except subprocess.TimeoutExpired as exc:
            raise ConversionFailedError(
                Messages.ERROR_CONVERSION_TIMEOUT.format(timeout=self.timeout)
            ) from exc
        if len(completed.stdout) > self.max_output:
            raise OutputTooLargeError(len(completed.stdout), self.max_output)
        if completed.returncode != 0:
            detail = completed.stderr.decode(self.encoding, errors="replace").strip()
            raise ConversionFailedError(detail or f"exit code {completed.returncode}")
        return completed.stdout.decode(self.encoding)


def bundle_files(records: list[FileRecord], marker: str) -> str:
    return "".join(
        f"\n// {marker}_BEGIN<{record.path}>\n{record.original()}\n// {marker}_END\n"
        for record in records
    )


def split_bundle(content: str, marker: str) -> dict[str, str]:
    """Return ``{path: text}`` for every marked part of a converted bundle."""
    pattern = re.compile(
        rf"(?:^|\n)[ \t]*// {marker}_BEGIN<(?P<path>[^\n]*)>[ \t]*\n"
        rf"(?P<body>.*?)\n?[ \t]*// {marker}_END",
        re.DOTALL,
    )
    return {match.group("path"): match.group("body") for match in pattern.finditer(content)}


def convert_all(
    files: Mapping[str, FileRecord],
    target: Syntax,
    build_marker: int,
    converter: Converter,
) -> set[str]:
    """Convert every record lacking *target* content with a single converter call.

    Returns the converted paths. No call is made when nothing needs conversion.
    """
    pending = [record for record in files.values() if not record.has_original(target)]
    if not pending:
        return set()

    marker = uuid.uuid4().hex
    # plain CSS already sits in the nested slot, so only two directions remain
    source = Syntax.INDENTED if target == Syntax.NESTED else Syntax.NESTED
    logger.debug(
        "Converting {} file(s) from {} to {}", len(pending), source.value, target.value
    )
    result = converter(bundle_files(pending, marker), source, target)
    fragments = split_bundle(result, marker)

    converted: set[str] = set()
    for record in pending:
        fragment = fragments.get(record.path)
        if fragment is None:
            raise ConversionFailedError(
                Messages.ERROR_CONVERSION_INCOMPLETE.format(path=record.path)
            )
        record.set_original(target, fragment, build_marker)
        converted.add(record.path)
    return converted
