from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Annotated

import httpx
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.syntax import Syntax

from agentgate import __version__
from agentgate.config import Settings, load_settings, reset_settings_cache
from agentgate.logging import get_logger, setup_logging
from agentgate.trace import TRACE_KINDS


_error_console = Console(stderr=True)
_console = Console()


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(__version__)
    raise typer.Exit()


app = typer.Typer(
    help="AgentGate: traced gateway for AI providers and an asset-management backend.",
    add_completion=False,
    rich_markup_mode="rich",
)


HostOption = Annotated[
    str | None,
    typer.Option(
        "--host",
        help="Bind host. Defaults to AGENTGATE_HOST / settings default.",
    ),
]
PortOption = Annotated[
    int | None,
    typer.Option(
        "--port",
        help="Bind port. Defaults to AGENTGATE_PORT / settings default.",
    ),
]
ReloadOption = Annotated[
    bool,
    typer.Option(
        "--reload",
        help="Enable auto-reload (development only).",
    ),
]
NoTraceOption = Annotated[
    bool,
    typer.Option(
        "--no-trace",
        help="Start with outbound call tracing disabled.",
    ),
]
TraceMaxItemsOption = Annotated[
    int | None,
    typer.Option(
        "--trace-max-items",
        help="Trace buffer capacity (oldest entries are evicted first).",
    ),
]
LogFileOption = Annotated[
    Path | None,
    typer.Option(
        "--log-file",
        help="Write logs to a file (in addition to console).",
    ),
]


def _run_server(
    *,
    host: str | None,
    port: int | None,
    reload: bool,
    no_trace: bool,
    trace_max_items: int | None,
    log_file: Path | None,
) -> None:
    if no_trace:
        os.environ["AGENTGATE_TRACE_ENABLED"] = "0"
    if trace_max_items is not None:
        os.environ["AGENTGATE_TRACE_MAX_ITEMS"] = str(int(trace_max_items))
    if log_file is not None:
        os.environ["AGENTGATE_LOG_FILE"] = str(log_file)

    reset_settings_cache()
    try:
        settings = load_settings()
    except ValidationError as exc:
        _print_settings_validation_error(exc)
        raise typer.Exit(code=1) from exc
    except ValueError as exc:
        _error_console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc

    host = host or settings.agentgate_host
    port = port or settings.agentgate_port

    setup_logging(
        settings.agentgate_log_level,
        log_file=str(settings.agentgate_log_file) if settings.agentgate_log_file else None,
    )
    logger = get_logger()
    scheme = "https" if settings.agentgate_ssl_certfile else "http"
    logger.info("Starting AgentGate on {}://{}:{}", scheme, host, port)

    import uvicorn

    uvicorn.run(
        "agentgate.app:app",
        host=host,
        port=port,
        reload=reload,
        log_config=None,
        ssl_certfile=str(settings.agentgate_ssl_certfile)
        if settings.agentgate_ssl_certfile
        else None,
        ssl_keyfile=str(settings.agentgate_ssl_keyfile)
        if settings.agentgate_ssl_keyfile
        else None,
        ssl_keyfile_password=settings.agentgate_ssl_keyfile_password,
    )


def _print_settings_validation_error(exc: ValidationError) -> None:
    details: list[str] = []
    for err in exc.errors():
        loc = err.get("loc") or ()
        field = loc[-1] if loc else "settings"

        if isinstance(field, str) and field in Settings.model_fields:
            alias = Settings.model_fields[field].alias or field
        else:
            alias = str(field)

        msg = err.get("msg") or "Invalid value"
        details.append(f"{alias}: {msg}")

    _error_console.print("[bold red]AgentGate configuration error[/bold red]")
    for line in details:
        _error_console.print(f"[red]- {line}[/red]")
    _error_console.print("[dim]Fix your environment variables or .env file and retry.[/dim]")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
    host: HostOption = None,
    port: PortOption = None,
    reload: ReloadOption = False,
    no_trace: NoTraceOption = False,
    trace_max_items: TraceMaxItemsOption = None,
    log_file: LogFileOption = None,
) -> None:
    """Start the AgentGate server (default command)."""
    if ctx.invoked_subcommand is not None:
        return
    _run_server(
        host=host,
        port=port,
        reload=reload,
        no_trace=no_trace,
        trace_max_items=trace_max_items,
        log_file=log_file,
    )


@app.command("serve")
def serve(
    host: HostOption = None,
    port: PortOption = None,
    reload: ReloadOption = False,
    no_trace: NoTraceOption = False,
    trace_max_items: TraceMaxItemsOption = None,
    log_file: LogFileOption = None,
) -> None:
    """Start the AgentGate server."""
    _run_server(
        host=host,
        port=port,
        reload=reload,
        no_trace=no_trace,
        trace_max_items=trace_max_items,
        log_file=log_file,
    )


def _default_base_url() -> str:
    host = os.environ.get("AGENTGATE_HOST", "127.0.0.1")
    port_raw = os.environ.get("AGENTGATE_PORT", "8080")
    try:
        port = int(port_raw)
    except ValueError:
        port = 8080
    return f"http://{host}:{port}"


@app.command("trace")
def trace(
    kind: Annotated[
        str | None,
        typer.Option(
            "--kind",
            help="Only show one kind: ai|backend|rest|models.",
        ),
    ] = None,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            min=1,
            help="Maximum number of items (newest first).",
        ),
    ] = 20,
    base_url: Annotated[
        str | None,
        typer.Option(
            "--base-url",
            help="AgentGate base URL (defaults to http://AGENTGATE_HOST:AGENTGATE_PORT).",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the trace items JSON to a file.",
        ),
    ] = None,
    raw: Annotated[
        bool,
        typer.Option(
            "--raw",
            help="Print raw JSON to stdout (no rich formatting).",
        ),
    ] = False,
) -> None:
    """Show recent outbound calls recorded by a running gateway."""
    base_url = (base_url or _default_base_url()).rstrip("/")
    params: dict[str, str | int] = {"limit": limit}
    if kind:
        kind_norm = kind.strip().lower()
        if kind_norm not in TRACE_KINDS:
            raise typer.BadParameter(f"kind must be one of {'|'.join(TRACE_KINDS)}")
        params["kind"] = kind_norm

    try:
        resp = httpx.get(f"{base_url}/api/traces", params=params, timeout=15.0)
    except httpx.RequestError as exc:
        _error_console.print(f"[bold red]Request failed:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc

    if resp.status_code >= 400:
        body = resp.text
        try:
            body = json.dumps(resp.json(), ensure_ascii=False, indent=2)
        except ValueError:
            pass
        _error_console.print(f"[bold red]HTTP {resp.status_code}[/bold red]")
        _error_console.print(body)
        raise typer.Exit(code=1)

    items = resp.json().get("traces", [])
    text = json.dumps(items, ensure_ascii=False, indent=2)
    if output is not None:
        output.write_text(text + "\n", encoding="utf-8")
        _console.print(f"[dim]Wrote {len(items)} trace items to {output}[/dim]")

    if raw:
        typer.echo(text)
        return

    _console.print(Syntax(text, "json", word_wrap=False))
