import subprocess

import pytest

from stylemerge.errors import ConversionFailedError, OutputTooLargeError
from stylemerge.models import FileRecord
from stylemerge.services import convert_service
from stylemerge.services.convert_service import (
    SassConvertConverter,
    bundle_files,
    convert_all,
    split_bundle,
)
from stylemerge.syntax import Syntax


class FakeConverter:
    def __init__(self, transform=lambda content: content):
        self.calls = []
        self.transform = transform

    def __call__(self, content, from_syntax, to_syntax):
        self.calls.append((content, from_syntax, to_syntax))
        return self.transform(content)


def test_convert_all_batches_pending_records():
    files = {
        "/p/a.scss": FileRecord("/p/a.scss", ".a{color:red}", 1),
        "/p/b.scss": FileRecord("/p/b.scss", ".b{color:blue}", 1),
    }
    converter = FakeConverter(lambda content: content.replace("color", "colour"))

    converted = convert_all(files, Syntax.INDENTED, 2, converter)

    assert converted == {"/p/a.scss", "/p/b.scss"}
    assert len(converter.calls) == 1
    assert converter.calls[0][1:] == (Syntax.NESTED, Syntax.INDENTED)
    assert files["/p/a.scss"].original(Syntax.INDENTED) == ".a{colour:red}"
    assert files["/p/b.scss"].last_updated == 2


def test_convert_all_skips_when_nothing_is_pending():
    files = {
        "/p/a.scss": FileRecord("/p/a.scss", ".a{}", 1),
        "/p/reset.css": FileRecord("/p/reset.css", "a{}", 1),
    }
    converter = FakeConverter()

    assert convert_all(files, Syntax.NESTED, 2, converter) == set()
    assert converter.calls == []


def test_convert_all_converts_indented_to_nested():
    files = {"/p/a.sass": FileRecord("/p/a.sass", ".a\n  color: red", 1)}
    converter = FakeConverter()

    convert_all(files, Syntax.NESTED, 2, converter)

    assert converter.calls[0][1:] == (Syntax.INDENTED, Syntax.NESTED)
    assert files["/p/a.sass"].original(Syntax.NESTED) == ".a\n  color: red"


def test_convert_all_fails_on_missing_fragment():
    files = {"/p/a.scss": FileRecord("/p/a.scss", ".a{}", 1)}

    with pytest.raises(ConversionFailedError):
        convert_all(files, Syntax.INDENTED, 2, FakeConverter(lambda content: ""))


def test_split_bundle_tolerates_reformatted_markers():
    marker = "abc123"
    bundle = bundle_files([FileRecord("/p/a.scss", ".a{}", 1)], marker)
    reformatted = bundle.replace("\n// ", "\n  // ")

    assert split_bundle(bundle, marker) == {"/p/a.scss": ".a{}"}
    assert split_bundle(reformatted, marker) == {"/p/a.scss": ".a{}"}


def test_sass_convert_invokes_binary(monkeypatch):
    captured = {}

    def fake_run(args, **kwargs):
        captured["args"] = args
        captured["input"] = kwargs["input"]
        return subprocess.CompletedProcess(args, 0, stdout=b".a\n  b: c", stderr=b"")

    monkeypatch.setattr(convert_service.subprocess, "run", fake_run)
    converter = SassConvertConverter("/usr/bin/sass-convert")

    result = converter(".a{b:c}", Syntax.NESTED, Syntax.INDENTED)

    assert result == ".a\n  b: c"
    assert captured["args"] == [
        "/usr/bin/sass-convert",
        "--from",
        "scss",
        "--to",
        "sass",
        "--stdin",
    ]
    assert captured["input"] == b".a{b:c}"


def test_sass_convert_rejects_oversized_output(monkeypatch):
    monkeypatch.setattr(
        convert_service.subprocess,
        "run",
        lambda args, **kwargs: subprocess.CompletedProcess(args, 0, stdout=b"abc", stderr=b""),
    )

    with pytest.raises(OutputTooLargeError) as excinfo:
        SassConvertConverter("sass-convert", max_output=2)("x", Syntax.NESTED, Syntax.INDENTED)

    assert excinfo.value.size == 3
    assert excinfo.value.limit == 2


def test_sass_convert_reports_stderr(monkeypatch):
    monkeypatch.setattr(
        convert_service.subprocess,
        "run",
        lambda args, **kwargs: subprocess.CompletedProcess(
            args, 1, stdout=b"", stderr=b"Syntax error on line 1"
        ),
    )

    with pytest.raises(ConversionFailedError) as excinfo:
        SassConvertConverter("sass-convert")("x", Syntax.NESTED, Syntax.INDENTED)

    assert excinfo.value.detail == "Syntax error on line 1"


def test_sass_convert_timeout(monkeypatch):
    def fake_run(args, **kwargs):
        raise subprocess.TimeoutExpired(args, kwargs["timeout"])

    monkeypatch.setattr(convert_service.subprocess, "run", fake_run)

    with pytest.raises(ConversionFailedError):
        SassConvertConverter("sass-convert", timeout=0.5)("x", Syntax.NESTED, Syntax.INDENTED)


def test_sass_convert_without_binary_fails_before_running(monkeypatch):
    def fake_run(args, **kwargs):
        raise AssertionError("should not run")

    monkeypatch.setattr(convert_service.subprocess, "run", fake_run)

    with pytest.raises(ConversionFailedError):
        SassConvertConverter(None)("x", Syntax.NESTED, Syntax.INDENTED)
