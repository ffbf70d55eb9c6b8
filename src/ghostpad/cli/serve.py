"""Completion endpoint server command."""

from __future__ import annotations

import click

from ghostpad.cli.context import GhostpadContext, pass_context


@click.command()
@click.option("--host", default=None, help="Interface to bind (default from config).")
@click.option("--port", type=int, default=None, help="Port to bind (default from config).")
@click.option("--password", default=None, help="Shared password clients must send.")
@pass_context
def serve(ctx: GhostpadContext, host: str | None, port: int | None, password: str | None) -> None:
    """Serve POST /api/complete-text for remote editors."""
    from ghostpad.core.config import get_server_password
    from ghostpad.services.api_server import API_PATH
    from ghostpad.services.api_server import serve as run_server
    from ghostpad.services.completion_service import CompletionService

    ctx.setup_console_logging()
    config = ctx.get_config()
    server_cfg = config["server"]
    host = host or server_cfg["host"]
    port = port if port is not None else int(server_cfg["port"])
    password = password if password is not None else get_server_password(config)

    if not password:
        ctx.formatter.error(
            "No server password. Pass --password, set GHOSTPAD_PASSWORD or server.password in the config."
        )
        raise SystemExit(1)

    ctx.formatter.success(f"Serving {API_PATH} on http://{host}:{port} (Ctrl+C to stop)")
    run_server(CompletionService(config), password, host, port)
