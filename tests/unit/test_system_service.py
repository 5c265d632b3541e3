import subprocess

from stylemerge import config as config_module
from stylemerge.services import system_service


def _prepare_config(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    config_file = config_dir / "config.json"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_file)
    return config_file


def test_check_converter_binary_found_on_path(monkeypatch):
    monkeypatch.setattr(system_service.shutil, "which", lambda name: f"/usr/bin/{name}")

    result = system_service.check_converter_binary(None)

    assert result.passed is True
    assert "/usr/bin/sass-convert" in result.message


def test_check_converter_binary_missing(monkeypatch):
    monkeypatch.setattr(system_service.shutil, "which", lambda name: None)

    result = system_service.check_converter_binary("custom-convert")

    assert result.passed is False
    assert "custom-convert" in result.message


def test_check_converter_runs_reports_version(monkeypatch):
    def fake_run(args, **kwargs):
        assert args == ["/usr/bin/sass-convert", "--version"]
        return subprocess.CompletedProcess(args, 0, stdout="Sass 3.7.4\n", stderr="")

    monkeypatch.setattr(system_service.subprocess, "run", fake_run)

    result = system_service.check_converter_runs("/usr/bin/sass-convert")

    assert result.passed is True
    assert "Sass 3.7.4" in result.message


def test_check_converter_runs_handles_failures(monkeypatch):
    def fake_run(args, **kwargs):
        raise OSError("exec format error")

    monkeypatch.setattr(system_service.subprocess, "run", fake_run)

    result = system_service.check_converter_runs("/usr/bin/sass-convert")

    assert result.passed is False
    assert result.detail == "exec format error"


def test_check_config_file_states(tmp_path, monkeypatch):
    config_file = _prepare_config(tmp_path, monkeypatch)
    assert system_service.check_config_file().passed is True

    config_file.parent.mkdir(parents=True)
    config_file.write_text("{broken")
    assert system_service.check_config_file().passed is False

    config_file.write_text('{"target": "sass"}')
    assert system_service.check_config_file().passed is True


def test_run_all_doctor_checks_skips_run_without_binary(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)
    monkeypatch.setattr(system_service.shutil, "which", lambda name: None)

    results = system_service.run_all_doctor_checks(None)

    assert [result.name for result in results] == ["Command", "Config", "Converter"]
