"""Completion gateway — forwards text to an LLM and returns the continuation plus token usage."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import anthropic
import openai
from pydantic import ValidationError

from ghostpad.core.config import load_config
from ghostpad.core.credentials import require_api_key
from ghostpad.core.exceptions import (
    CompletionParseError,
    CredentialError,
    GatewayError,
    InvalidSuffixError,
    UpstreamError,
)
from ghostpad.models.completion import DEFAULT_MODEL, Completion, CompletionPayload, provider_for

logger = logging.getLogger(__name__)

# gpt-4 rejects the json_object response format
_NO_JSON_MODE = {"gpt-4"}


def build_user_message(suffix: str) -> str:
    return f"<text>{suffix}</text>"


def parse_completion(content: str) -> str:
    """Extract the ``completion`` field from the model's JSON answer."""
    raw = content.strip()
    if raw.startswith("```"):
        raw = re.sub(r"^```(?:json)?\s*", "", raw)
        raw = re.sub(r"\s*```$", "", raw)
    try:
        return CompletionPayload.model_validate(json.loads(raw)).completion
    except (json.JSONDecodeError, ValidationError) as e:
        raise CompletionParseError(f"Invalid completion: {e}") from e


class CompletionService:
    """Synchronous gateway to OpenAI (gpt-*) and Anthropic (claude-*) chat models."""

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        openai_client: Any = None,
        anthropic_client: Any = None,
    ) -> None:
        gateway_cfg = (config if config is not None else load_config()).get("gateway", {})
        self.temperature = float(gateway_cfg.get("temperature", 0.25))
        self.max_tokens = int(gateway_cfg.get("max_tokens", 256))
        self.timeout = float(gateway_cfg.get("timeout_seconds", 30.0))
        self._openai = openai_client
        self._anthropic = anthropic_client

    # ── Clients ──────────────────────────────────────────────────────

    def _get_openai(self) -> Any:
        if self._openai is None:
            self._openai = openai.OpenAI(api_key=require_api_key("openai"), timeout=self.timeout)
        return self._openai

    def _get_anthropic(self) -> Any:
        if self._anthropic is None:
            self._anthropic = anthropic.Anthropic(api_key=require_api_key("anthropic"), timeout=self.timeout)
        return self._anthropic

    # ── Completion ───────────────────────────────────────────────────

    def complete(self, suffix: str, model: str = DEFAULT_MODEL, prompt: str = "") -> Completion:
        """Ask ``model`` to continue ``suffix`` under the system ``prompt``.

        Raises ``InvalidSuffixError`` for empty text, ``CompletionParseError``
        when the model does not answer with ``{"completion": ...}`` and
        ``UpstreamError`` for API, network and credential failures.
        """
        if not suffix:
            raise InvalidSuffixError("Invalid suffix")

        model = model or DEFAULT_MODEL
        logger.debug("Requesting completion from %s for %d chars", model, len(suffix))
        try:
            if provider_for(model) == "anthropic":
                return self._complete_anthropic(suffix, model, prompt)
            return self._complete_openai(suffix, model, prompt)
        except GatewayError:
            raise
        except CredentialError as e:
            raise UpstreamError(str(e)) from e
        except (openai.OpenAIError, anthropic.AnthropicError) as e:
            raise UpstreamError(f"{model} request failed: {e}") from e

    def _complete_openai(self, suffix: str, model: str, prompt: str) -> Completion:
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": prompt},
                {"role": "user", "content": build_user_message(suffix)},
            ],
            "temperature": self.temperature,
        }
        if model not in _NO_JSON_MODE:
            kwargs["response_format"] = {"type": "json_object"}

        response = self._get_openai().chat.completions.create(**kwargs)
        raw = response.model_dump()

        if not response.choices or response.choices[0].message.content is None:
            raise CompletionParseError("No completions found", response=raw)
        try:
            text = parse_completion(response.choices[0].message.content)
        except CompletionParseError as e:
            raise CompletionParseError("Invalid completion", response=raw) from e

        usage = response.usage
        return Completion(
            text=text,
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
            model=model,
            raw=raw,
        )

    def _complete_anthropic(self, suffix: str, model: str, prompt: str) -> Completion:
        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": build_user_message(suffix)}],
        }
        if prompt:
            kwargs["system"] = prompt

        message = self._get_anthropic().messages.create(**kwargs)
        raw = message.model_dump()

        texts = [block.text for block in message.content if getattr(block, "type", "") == "text"]
        if not texts:
            raise CompletionParseError("No completions found", response=raw)
        try:
            text = parse_completion("".join(texts))
        except CompletionParseError as e:
            raise CompletionParseError("Invalid completion", response=raw) from e

        return Completion(
            text=text,
            prompt_tokens=message.usage.input_tokens,
            completion_tokens=message.usage.output_tokens,
            model=model,
            raw=raw,
        )
