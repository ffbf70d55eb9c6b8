"""One-shot completion and model listing commands."""

from __future__ import annotations

from pathlib import Path

import click
from rich.markup import escape

from ghostpad.cli.context import GhostpadContext, pass_context
from ghostpad.output.formatter import usd


@click.command()
@click.argument("text", nargs=-1, required=True)
@click.option("--model", default=None, help="Model id (default from config).")
@click.option(
    "--prompt-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="File holding the system prompt.",
)
@pass_context
def complete(ctx: GhostpadContext, text: tuple[str, ...], model: str | None, prompt_file: Path | None) -> None:
    """Ask the model to continue TEXT once and print the suggestion.

    Examples:
        ghostpad complete "Der Satz des Pythagoras ist"
        ghostpad --json complete --model gpt-4o-mini "Once upon a time"
    """
    from ghostpad.core.exceptions import GatewayError
    from ghostpad.models.completion import DEFAULT_PROMPT
    from ghostpad.services.completion_service import CompletionService
    from ghostpad.services.usage import UsageTracker

    ctx.setup_console_logging()
    config = ctx.get_config()
    model = model or config["editor"]["model"]
    if prompt_file:
        prompt = prompt_file.read_text(encoding="utf-8")
    else:
        prompt = config["editor"].get("prompt") or DEFAULT_PROMPT

    suffix = " ".join(text)
    try:
        completion = CompletionService(config).complete(suffix, model, prompt)
    except GatewayError as e:
        ctx.formatter.error(f"Completion failed: {e}")
        raise SystemExit(1)

    usage = UsageTracker()
    cost = usage.record(model, completion.prompt_tokens, completion.completion_tokens)

    if ctx.json_mode:
        ctx.formatter.json({
            "suggestion": completion.text,
            "model": model,
            "prompt_tokens": completion.prompt_tokens,
            "completion_tokens": completion.completion_tokens,
            "cost_usd": cost,
        })
        return

    ctx.formatter.print(f"{escape(suffix)}[grey50]{escape(completion.text)}[/grey50]", markup=True, highlight=False)
    ctx.formatter.info(
        f"{model}: {completion.prompt_tokens} prompt + {completion.completion_tokens} completion tokens, {usd(cost)}"
    )


@click.command()
@pass_context
def models(ctx: GhostpadContext) -> None:
    """List supported models and their prices."""
    from ghostpad.models.completion import ModelName, get_price, provider_for

    rows = []
    json_data = []
    for m in ModelName:
        price = get_price(m.value)
        rows.append([m.value, provider_for(m.value), usd(price.input), usd(price.output)])
        json_data.append({
            "model": m.value,
            "provider": provider_for(m.value),
            "input_per_million": price.input,
            "output_per_million": price.output,
        })

    ctx.formatter.table(
        title="Models (USD per 1M tokens)",
        columns=[("Model", "bold"), ("Provider", "dim"), ("Input", "green"), ("Output", "green")],
        rows=rows,
        data_for_json=json_data,
    )
