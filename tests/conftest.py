"""Shared fixtures: isolated config directory and a scriptable completion gateway."""

from __future__ import annotations

import asyncio
import logging

import pytest

from ghostpad.models.completion import Completion


class FakeGateway:
    """Gateway double. Replies are consumed in call order; ``hold`` blocks until set."""

    def __init__(self, replies: list[str] | None = None, error: Exception | None = None) -> None:
        self.replies = list(replies or [])
        self.error = error
        self.hold: asyncio.Event | None = None
        self.calls: list[tuple[str, str, str]] = []
        self.closed = False

    async def complete(self, suffix: str, model: str, prompt: str) -> Completion:
        self.calls.append((suffix, model, prompt))
        reply = self.replies.pop(0) if self.replies else " und so weiter."
        if self.hold is not None:
            await self.hold.wait()
        if self.error is not None:
            raise self.error
        return Completion(
            text=reply,
            prompt_tokens=100,
            completion_tokens=20,
            model=model,
            raw={"suggestion": reply},
        )

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point the config layer at a temporary directory."""
    monkeypatch.setenv("GHOSTPAD_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.delenv("GHOSTPAD_PASSWORD", raising=False)
    return tmp_path / "config"


@pytest.fixture(autouse=True)
def reset_ghostpad_logger():
    """Undo ``setup_logging`` so records keep reaching caplog in later tests."""
    logger = logging.getLogger("ghostpad")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
