import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from agentgate import __version__
from agentgate.cli import app
from agentgate.config import reset_settings_cache


def test_cli_version_does_not_read_settings() -> None:
    reset_settings_cache()
    runner = CliRunner()
    result = runner.invoke(app, ["--version"], env={"AGENTGATE_TRACE_MAX_ITEMS": "0"})
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__
    assert result.stderr.strip() == ""


def test_cli_invalid_setting_shows_clean_error() -> None:
    reset_settings_cache()
    runner = CliRunner()
    result = runner.invoke(app, [], env={"AGENTGATE_TRACE_MAX_ITEMS": "0"})
    assert result.exit_code == 1
    assert "configuration error" in result.stderr.lower()
    assert "AGENTGATE_TRACE_MAX_ITEMS" in result.stderr
    reset_settings_cache()


def test_main_script_runs_the_cli(monkeypatch, capsys) -> None:
    monkeypatch.syspath_prepend(str(Path(__file__).resolve().parents[1]))
    monkeypatch.setattr(sys, "argv", ["main.py", "--version"])
    import main

    with pytest.raises(SystemExit) as exc:
        main.main()

    assert exc.value.code == 0
    assert capsys.readouterr().out.strip() == __version__
