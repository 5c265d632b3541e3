import json
import re
import time

import pytest
from typer.testing import CliRunner

from stylemerge import cli
from stylemerge.cli import app
from stylemerge.services.system_service import DoctorCheckResult
from stylemerge.text import Messages


ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    return ANSI_RE.sub("", text)


@pytest.fixture(autouse=True)
def temp_config_home(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    config_file = config_dir / "config.json"
    monkeypatch.setattr("stylemerge.config.CONFIG_DIR", config_dir)
    monkeypatch.setattr("stylemerge.config.CONFIG_FILE", config_file)
    return config_file


class FakeObserver:
    def schedule(self, handler, path, recursive=False):
        return path

    def unschedule(self, watch):
        return None

    def start(self):
        return None

    def stop(self):
        return None

    def is_alive(self):
        return False

    def join(self, timeout=None):
        return None


def test_build_writes_output_file(tmp_path):
    (tmp_path / "main.scss").write_text('@import "b";\n.x{color:red}')
    (tmp_path / "b.scss").write_text(".y{color:blue}")
    output = tmp_path / "dist" / "bundle.scss"

    result = CliRunner().invoke(
        app, ["build", "-i", str(tmp_path / "main.scss"), "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    assert output.read_text() == ".y{color:blue}\n.x{color:red}"
    assert "Merged stylesheet saved" in strip_ansi(result.stdout)


def test_build_prints_to_stdout_without_output(tmp_path):
    (tmp_path / "main.scss").write_text(".x{}")

    result = CliRunner().invoke(app, ["build", "-i", str(tmp_path / "main.scss")])

    assert result.exit_code == 0
    assert result.stdout == ".x{}"


def test_build_reports_merge_errors(tmp_path):
    (tmp_path / "main.scss").write_text('@import "missing";')

    result = CliRunner().invoke(app, ["build", "-i", str(tmp_path / "main.scss")])

    assert result.exit_code == 1
    assert "missing" in strip_ansi(result.output)


def test_build_rejects_invalid_target(tmp_path):
    (tmp_path / "main.scss").write_text(".x{}")

    result = CliRunner().invoke(
        app, ["build", "-i", str(tmp_path / "main.scss"), "--target", "css"]
    )

    assert result.exit_code == 2


def test_build_watch_writes_output_and_stops(tmp_path, monkeypatch):
    (tmp_path / "main.scss").write_text(".x{}")
    output = tmp_path / "bundle.scss"
    monkeypatch.setattr("stylemerge.services.watch_service.Observer", FakeObserver)

    def fake_wait():
        deadline = time.monotonic() + 5
        while not output.exists() and time.monotonic() < deadline:
            time.sleep(0.01)
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "_wait_for_interrupt", fake_wait)

    result = CliRunner().invoke(
        app, ["build", "-i", str(tmp_path / "main.scss"), "-o", str(output), "--watch"]
    )

    assert result.exit_code == 0, result.output
    assert output.read_text() == ".x{}"
    stdout = strip_ansi(result.stdout)
    assert Messages.INFO_BUILD_RUNNING in stdout
    assert Messages.INFO_WATCH_STOPPED in stdout


def test_config_set_and_show(temp_config_home):
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["config", "--set-target", "sass", "--set-binary", "/opt/sass-convert", "--set-public-path", "/assets/"],
    )
    assert result.exit_code == 0, result.output
    assert json.loads(temp_config_home.read_text()) == {
        "binary": "/opt/sass-convert",
        "target": "sass",
        "public_path": "/assets/",
    }

    shown = runner.invoke(app, ["config", "--show"])
    output = strip_ansi(shown.stdout)
    assert "Target syntax: sass" in output
    assert "Converter binary: /opt/sass-convert" in output


def test_config_rejects_invalid_values(temp_config_home):
    result = CliRunner().invoke(app, ["config", "--set-max-output", "0"])

    assert result.exit_code == 2
    assert not temp_config_home.exists()


def test_config_reset(temp_config_home):
    runner = CliRunner()
    runner.invoke(app, ["config", "--set-target", "sass"])

    result = runner.invoke(app, ["config", "--reset"])

    assert result.exit_code == 0
    assert not temp_config_home.exists()
    assert Messages.INFO_CONFIG_RESET in strip_ansi(result.stdout)


def test_doctor_reports_failures(monkeypatch):
    monkeypatch.setattr(
        cli,
        "run_all_doctor_checks",
        lambda binary: [
            DoctorCheckResult(name="Command", passed=True, message="ok"),
            DoctorCheckResult(name="Converter", passed=False, message="missing", detail="install it"),
        ],
    )

    result = CliRunner().invoke(app, ["doctor"])

    assert result.exit_code == 1
    output = strip_ansi(result.stdout)
    assert "Converter:" in output
    assert "install it" in output
    assert Messages.DOCTOR_SOME_FAILED in output


def test_doctor_all_passed(monkeypatch):
    monkeypatch.setattr(
        cli,
        "run_all_doctor_checks",
        lambda binary: [DoctorCheckResult(name="Command", passed=True, message="ok")],
    )

    result = CliRunner().invoke(app, ["doctor"])

    assert result.exit_code == 0
    assert Messages.DOCTOR_ALL_PASSED in strip_ansi(result.stdout)
