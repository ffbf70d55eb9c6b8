"""The completion contract the suggestion controller consumes."""

from __future__ import annotations

import asyncio
from typing import Protocol

from ghostpad.models.completion import Completion
from ghostpad.services.completion_service import CompletionService


class CompletionGateway(Protocol):
    async def complete(self, suffix: str, model: str, prompt: str) -> Completion:
        """Return a continuation of ``suffix`` or raise ``GatewayError``."""
        ...

    async def aclose(self) -> None:
        ...


class ServiceGateway:
    """Runs the blocking ``CompletionService`` in a worker thread.

    Cancellation stops the wait, not the thread; a late result is discarded.
    """

    def __init__(self, service: CompletionService) -> None:
        self.service = service

    async def complete(self, suffix: str, model: str, prompt: str) -> Completion:
        return await asyncio.to_thread(self.service.complete, suffix, model, prompt)

    async def aclose(self) -> None:
        return None
