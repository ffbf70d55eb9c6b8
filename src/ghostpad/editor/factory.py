"""Builds a ready-to-run SuggestionController from config plus overrides."""

from __future__ import annotations

from ghostpad.core.config import get_server_password
from ghostpad.editor.buffer import EditorBuffer
from ghostpad.editor.controller import SuggestionController, SuggestionSettings
from ghostpad.editor.gateway import CompletionGateway, ServiceGateway
from ghostpad.models.completion import DEFAULT_PROMPT
from ghostpad.services.completion_service import CompletionService


def build_gateway(config: dict, endpoint: str | None = None, password: str | None = None) -> CompletionGateway:
    """Remote endpoint when one is configured, otherwise the provider APIs in a worker thread."""
    gateway_cfg = config["gateway"]
    endpoint = endpoint if endpoint is not None else gateway_cfg.get("endpoint", "")
    if endpoint:
        from ghostpad.services.api_client import HttpCompletionGateway

        return HttpCompletionGateway(
            endpoint,
            password if password is not None else get_server_password(config),
            timeout=float(gateway_cfg.get("timeout_seconds", 30.0)),
        )

    return ServiceGateway(CompletionService(config))


def build_controller(
    config: dict,
    text: str | None = None,
    wait_ms: int | None = None,
    model: str | None = None,
    prompt: str | None = None,
    endpoint: str | None = None,
    password: str | None = None,
) -> SuggestionController:
    """Wire buffer, gateway and settings together."""
    editor_cfg = config["editor"]
    settings = SuggestionSettings(
        wait_time_ms=wait_ms if wait_ms is not None else int(editor_cfg["wait_time_ms"]),
        model=model or editor_cfg["model"],
        prompt=prompt if prompt is not None else (editor_cfg.get("prompt") or DEFAULT_PROMPT),
    )
    buffer = EditorBuffer.from_text(text if text is not None else editor_cfg.get("initial_text", ""))
    return SuggestionController(buffer, build_gateway(config, endpoint, password), settings)
