"""Root CLI group — entry point for all Ghostpad commands."""

from __future__ import annotations

import click

from ghostpad import __version__
from ghostpad.cli.context import GhostpadContext


@click.group(invoke_without_command=True)
@click.option("--json", "json_mode", is_flag=True, help="Output JSON for scripting.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
@click.version_option(__version__, prog_name="Ghostpad")
@click.pass_context
def cli(ctx: click.Context, json_mode: bool, verbose: bool) -> None:
    """Ghostpad — a text editor with inline LLM ghost-text suggestions.

    Run without a subcommand to open the editor.
    """
    ctx.ensure_object(GhostpadContext)
    ctx.obj = GhostpadContext(json_mode=json_mode, verbose=verbose)

    if ctx.invoked_subcommand is None:
        # No subcommand → open the editor with configured defaults
        from ghostpad.cli.edit import edit

        ctx.invoke(edit)


# ── Register subcommands ──────────────────────────────────────────

from ghostpad.cli.edit import edit
cli.add_command(edit)

from ghostpad.cli.serve import serve
cli.add_command(serve)

from ghostpad.cli.complete import complete, models
cli.add_command(complete)
cli.add_command(models)

from ghostpad.cli.config_cmd import config
cli.add_command(config)


def main() -> None:
    cli()
