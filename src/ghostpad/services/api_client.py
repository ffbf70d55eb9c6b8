"""Async client for ``POST /api/complete-text`` — the editor's remote gateway."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from ghostpad.core.exceptions import (
    AuthenticationError,
    CompletionParseError,
    InvalidSuffixError,
    UpstreamError,
)
from ghostpad.models.completion import Completion, EndpointResponse
from ghostpad.services.api_server import API_PATH

logger = logging.getLogger(__name__)


class HttpCompletionGateway:
    """Calls a running ``ghostpad serve`` (or compatible) endpoint.

    Cancelling the awaiting task aborts the HTTP request.
    """

    def __init__(
        self,
        endpoint: str,
        password: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.password = password
        self._client = httpx.AsyncClient(base_url=self.endpoint, timeout=timeout, transport=transport)

    async def complete(self, suffix: str, model: str, prompt: str) -> Completion:
        params = {"suffix": suffix, "password": self.password, "model": model, "prompt": prompt}
        try:
            response = await self._client.post(API_PATH, params=params)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Request to {self.endpoint} failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise CompletionParseError(
                f"Endpoint returned a non-JSON body (HTTP {response.status_code})"
            ) from e
        if not isinstance(payload, dict):
            raise CompletionParseError(f"Endpoint returned {type(payload).__name__}, expected an object")

        if response.status_code == 401:
            raise AuthenticationError(payload.get("error", "Invalid password"), response=payload)
        if response.status_code == 400:
            raise InvalidSuffixError(payload.get("error", "Invalid suffix"), response=payload)
        if not response.is_success:
            raise UpstreamError(
                f"{payload.get('error', 'Request failed')} (HTTP {response.status_code})",
                response=payload,
            )

        try:
            body = EndpointResponse.model_validate(payload)
        except ValidationError as e:
            raise CompletionParseError(f"Malformed endpoint response: {e}", response=payload) from e

        logger.debug("Endpoint returned %d chars", len(body.suggestion))
        return Completion(
            text=body.suggestion,
            prompt_tokens=body.prompt_tokens,
            completion_tokens=body.completion_tokens,
            model=model,
            raw=payload,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
