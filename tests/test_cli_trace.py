import json
from pathlib import Path

import httpx
import respx
from typer.testing import CliRunner

from agentgate.cli import app
from agentgate.config import reset_settings_cache


_ENV = {"AGENTGATE_HOST": None, "AGENTGATE_PORT": None}
_ITEMS = [
    {
        "id": "0000000000001-00000001",
        "timestamp": "2024-01-01T00:00:00Z",
        "kind": "backend",
        "status": 200,
    }
]


def test_cli_trace_prints_raw_items() -> None:
    reset_settings_cache()
    runner = CliRunner()
    with respx.mock:
        route = respx.get("http://127.0.0.1:8080/api/traces").mock(
            return_value=httpx.Response(200, json={"traces": _ITEMS})
        )
        result = runner.invoke(app, ["trace", "--kind", "backend", "--raw"], env=_ENV)

    assert result.exit_code == 0
    assert json.loads(result.stdout) == _ITEMS
    params = route.calls.last.request.url.params
    assert params["kind"] == "backend"
    assert params["limit"] == "20"


def test_cli_trace_can_write_output_file() -> None:
    reset_settings_cache()
    runner = CliRunner()
    with runner.isolated_filesystem():
        with respx.mock:
            respx.get("http://gateway.local:9000/api/traces").mock(
                return_value=httpx.Response(200, json={"traces": _ITEMS})
            )
            result = runner.invoke(
                app,
                [
                    "trace",
                    "--base-url",
                    "http://gateway.local:9000/",
                    "--raw",
                    "--output",
                    "traces.json",
                ],
                env=_ENV,
            )
        assert result.exit_code == 0
        assert json.loads(Path("traces.json").read_text(encoding="utf-8")) == _ITEMS


def test_cli_trace_rejects_unknown_kind() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["trace", "--kind", "ui"], env=_ENV)
    assert result.exit_code != 0


def test_cli_trace_reports_http_errors() -> None:
    runner = CliRunner()
    with respx.mock:
        respx.get("http://127.0.0.1:8080/api/traces").mock(
            return_value=httpx.Response(500, json={"error": "boom"})
        )
        result = runner.invoke(app, ["trace", "--raw"], env=_ENV)
    assert result.exit_code == 1
    assert "HTTP 500" in result.stderr
