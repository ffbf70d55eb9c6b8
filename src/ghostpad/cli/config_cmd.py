"""Configuration commands."""

from __future__ import annotations

from typing import Any

import click

from ghostpad.cli.context import GhostpadContext, pass_context


def coerce_value(current: Any, raw: str) -> Any:
    """Convert ``raw`` to the type of the existing setting."""
    if isinstance(current, bool):
        lowered = raw.strip().lower()
        if lowered in ("true", "yes", "on", "1"):
            return True
        if lowered in ("false", "no", "off", "0"):
            return False
        raise click.BadParameter(f"Expected a boolean, got {raw!r}")
    if isinstance(current, int):
        try:
            return int(raw)
        except ValueError as e:
            raise click.BadParameter(f"Expected an integer, got {raw!r}") from e
    if isinstance(current, float):
        try:
            return float(raw)
        except ValueError as e:
            raise click.BadParameter(f"Expected a number, got {raw!r}") from e
    return raw


@click.group()
def config() -> None:
    """Show and change settings."""
    pass


@config.command("show")
@pass_context
def config_show(ctx: GhostpadContext) -> None:
    """Print the effective configuration."""
    from ghostpad.core.config import get_config_path

    cfg = ctx.get_config()
    if ctx.json_mode:
        ctx.formatter.json(cfg)
        return

    rows = []
    for section, values in cfg.items():
        for key, value in values.items():
            shown = "********" if key == "password" and value else str(value)
            if len(shown) > 60:
                shown = shown[:57] + "..."
            rows.append([f"{section}.{key}", shown])
    ctx.formatter.table(
        title=f"Config ({get_config_path()})",
        columns=[("Setting", "bold cyan"), ("Value", "")],
        rows=rows,
    )


@config.command("set")
@click.argument("name")
@click.argument("value")
@pass_context
def config_set(ctx: GhostpadContext, name: str, value: str) -> None:
    """Set SECTION.KEY to VALUE, e.g. 'ghostpad config set editor.wait_time_ms 800'."""
    from ghostpad.core.config import load_config, update_config
    from ghostpad.core.exceptions import ConfigError

    section, _, key = name.partition(".")
    current_cfg = load_config()
    if not key or section not in current_cfg or key not in current_cfg[section]:
        raise click.BadParameter(f"Unknown setting: {name}", param_hint="NAME")

    new_value = coerce_value(current_cfg[section][key], value)
    try:
        update_config(**{section: {key: new_value}})
    except ConfigError as e:
        ctx.formatter.error(str(e))
        raise SystemExit(1)

    if ctx.json_mode:
        ctx.formatter.json({"name": name, "value": new_value})
    else:
        ctx.formatter.success(f"{name} = {new_value!r}")


@config.command("set-key")
@click.argument("provider", type=click.Choice(["openai", "anthropic"]))
@click.option("--key", prompt="API key", hide_input=True, help="The API key (prompted if omitted).")
@pass_context
def config_set_key(ctx: GhostpadContext, provider: str, key: str) -> None:
    """Store an API key for PROVIDER in the system keychain."""
    from ghostpad.core.credentials import save_api_key
    from ghostpad.core.exceptions import CredentialError

    try:
        save_api_key(provider, key.strip())
    except CredentialError as e:
        ctx.formatter.error(str(e))
        raise SystemExit(1)
    ctx.formatter.success(f"Saved {provider} API key to the keychain.")


@config.command("delete-key")
@click.argument("provider", type=click.Choice(["openai", "anthropic"]))
@pass_context
def config_delete_key(ctx: GhostpadContext, provider: str) -> None:
    """Remove the stored API key for PROVIDER from the system keychain."""
    from ghostpad.core.credentials import delete_api_key

    delete_api_key(provider)
    ctx.formatter.success(f"Removed {provider} API key from the keychain.")
