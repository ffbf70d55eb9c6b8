"""Editor launcher."""

from __future__ import annotations

from pathlib import Path

import click

from ghostpad.cli.context import GhostpadContext, pass_context


@click.command()
@click.option("--text", default=None, help="Initial document text.")
@click.option("--wait-ms", type=click.IntRange(min=0), default=None, help="Debounce delay before fetching a suggestion.")
@click.option("--model", default=None, help="Model id, e.g. gpt-4o-mini or claude-haiku-4-5.")
@click.option(
    "--prompt-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="File holding the system prompt.",
)
@click.option("--endpoint", default=None, help="Use a running 'ghostpad serve' at this URL instead of calling the API directly.")
@click.option("--password", default=None, help="Shared password for --endpoint.")
@pass_context
def edit(
    ctx: GhostpadContext,
    text: str | None,
    wait_ms: int | None,
    model: str | None,
    prompt_file: Path | None,
    endpoint: str | None,
    password: str | None,
) -> None:
    """Open the editor."""
    from ghostpad.core.config import get_log_path
    from ghostpad.core.credentials import get_api_key
    from ghostpad.core.log import setup_logging
    from ghostpad.editor.factory import build_controller
    from ghostpad.editor.gateway import ServiceGateway
    from ghostpad.models.completion import provider_for

    config = ctx.get_config()
    level = "DEBUG" if ctx.verbose else config["logging"]["level"]
    setup_logging(level, log_file=get_log_path(config))

    prompt = prompt_file.read_text(encoding="utf-8") if prompt_file else None
    controller = build_controller(config, text, wait_ms, model, prompt, endpoint, password)

    if isinstance(controller.gateway, ServiceGateway):
        provider = provider_for(controller.settings.model)
        if get_api_key(provider) is None:
            ctx.formatter.warning(
                f"No {provider} API key found; suggestions will fail. Run 'ghostpad config set-key {provider}'."
            )

    try:
        from ghostpad.tui.app import GhostpadApp

        GhostpadApp(controller).run()
    except ImportError as e:
        ctx.formatter.error(f"Editor requires textual: {e}")
