"""Suggestion controller — debounces edits, fetches completions, splices ghost text.

Lifecycle of one suggestion:

1. Every user change bumps ``state.last_change``, cancels the in-flight request
   and the armed debounce timer, then arms a new timer.
2. When the timer fires and nothing newer happened, a ``PendingRequest`` is
   issued through the gateway.
3. The response is inserted as a pending run at the caret only if its change
   stamp is still the latest and the caret is collapsed.
4. Keystrokes over a pending run accept it (Tab), accept one character
   (typing the run's first character) or reject it (anything else).

Everything runs on one asyncio loop, so no locking is needed.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from ghostpad.core.exceptions import GatewayError
from ghostpad.editor.buffer import EditorBuffer
from ghostpad.editor.gateway import CompletionGateway
from ghostpad.editor.keys import KeyPress, is_function_key, is_modifier_key
from ghostpad.models.completion import DEFAULT_MODEL, DEFAULT_PROMPT
from ghostpad.models.document import Mark
from ghostpad.services.usage import UsageTracker

logger = logging.getLogger(__name__)


class SuggestionStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class SuggestionSettings:
    wait_time_ms: int = 500
    model: str = DEFAULT_MODEL
    prompt: str = DEFAULT_PROMPT


@dataclass
class PendingRequest:
    suffix_text: str
    change_stamp: int
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    issued_at: float = field(default_factory=time.monotonic)
    cancel_token: asyncio.Task | None = None

    def cancel(self) -> None:
        if self.cancel_token is not None and not self.cancel_token.done():
            self.cancel_token.cancel()


@dataclass
class ControllerState:
    last_change: int = 0
    pending: PendingRequest | None = None
    suggestions_enabled: bool = True
    status: SuggestionStatus = SuggestionStatus.IDLE
    last_error: str | None = None
    last_response: dict[str, Any] | None = None


class SuggestionController:
    def __init__(
        self,
        buffer: EditorBuffer,
        gateway: CompletionGateway,
        settings: SuggestionSettings | None = None,
        usage: UsageTracker | None = None,
        on_update: Callable[[], None] | None = None,
    ) -> None:
        self.buffer = buffer
        self.gateway = gateway
        self.settings = settings or SuggestionSettings()
        self.usage = usage or UsageTracker()
        self.on_update = on_update
        self.state = ControllerState()
        self._timer: asyncio.Task | None = None

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update()

    # ── Keystrokes ───────────────────────────────────────────────

    def press(self, key: KeyPress) -> bool:
        """Feed one keystroke: intercept it, else run the default edit.

        Returns True when the controller consumed the key itself.
        """
        before = self.buffer.snapshot()
        consumed = self.handle_key(key)
        if not consumed:
            self.buffer.handle_default(key)
        if self.buffer.version != before.version:
            self.buffer.remember(before)
            self.on_change()
        self._notify()
        return consumed

    def handle_key(self, key: KeyPress) -> bool:
        """Suggestion-specific handling of a keystroke, before any default edit."""
        if not self.buffer.selection.collapsed:
            return False

        found = self.buffer.pending_after_caret()
        if found is None:
            if key.is_character or key.key == "Enter":
                self.state.suggestions_enabled = True
            return False

        block, index = found
        pending_text = self.buffer.document.run(block, index).text

        if key.key == "Tab" and not key.is_shortcut:
            accepted = self.buffer.accept_suggestion()
            logger.debug("Accepted suggestion (%d chars)", len(accepted))
            return True
        if key.is_character and pending_text.startswith(key.key):
            self.buffer.accept_character(key.key)
            return True
        if not is_modifier_key(key.key) and not is_function_key(key.key):
            self.buffer.reject_suggestion()
            self.state.suggestions_enabled = False
            logger.debug("Rejected suggestion with %r", key.key)
        return False

    def toggle_mark(self, mark: Mark) -> None:
        before = self.buffer.version
        self.buffer.toggle_mark(mark)
        if self.buffer.version != before:
            self.on_change()
        self._notify()

    def undo(self) -> bool:
        undone = self.buffer.undo()
        if undone:
            self.on_change()
        self._notify()
        return undone

    # ── Change events & debounce ─────────────────────────────────

    def on_change(self) -> None:
        """Record a user change and re-arm the debounce timer. Needs a running loop."""
        self.state.last_change += 1
        stamp = self.state.last_change

        self._cancel_request()
        self._cancel_timer()

        if not self.buffer.selection.collapsed:
            return
        if self.buffer.pending_after_caret() is not None:
            return

        suffix = self.buffer.text_before_caret()
        if not suffix:
            return
        self._timer = asyncio.get_running_loop().create_task(self._debounce(stamp, suffix))

    async def _debounce(self, stamp: int, suffix: str) -> None:
        await asyncio.sleep(max(self.settings.wait_time_ms, 0) / 1000)
        self._timer = None
        self.fire(stamp, suffix)

    def fire(self, stamp: int, suffix: str) -> PendingRequest | None:
        """Timer expiry: issue a request unless something newer or already running."""
        if stamp != self.state.last_change:
            return None
        if self.state.pending is not None or not self.state.suggestions_enabled:
            return None

        request = PendingRequest(suffix_text=suffix, change_stamp=stamp)
        request.cancel_token = asyncio.get_running_loop().create_task(self._fetch(request))
        self.state.pending = request
        self.state.status = SuggestionStatus.PENDING
        logger.debug("Issued request %s at change %d", request.request_id, stamp)
        self._notify()
        return request

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def _cancel_request(self) -> None:
        request = self.state.pending
        if request is None:
            return
        request.cancel()
        self.state.pending = None
        if self.state.status == SuggestionStatus.PENDING:
            self.state.status = SuggestionStatus.IDLE
        logger.debug("Cancelled request %s", request.request_id)

    # ── Responses ────────────────────────────────────────────────

    async def _fetch(self, request: PendingRequest) -> None:
        settings = self.settings
        try:
            completion = await self.gateway.complete(request.suffix_text, settings.model, settings.prompt)
        except GatewayError as e:
            logger.error("Suggestion request %s failed: %s", request.request_id, e)
            self._fail(request, str(e), e.response)
            return
        except Exception as e:
            logger.exception("Suggestion request %s failed unexpectedly", request.request_id)
            self._fail(request, str(e) or type(e).__name__, None)
            return

        if self.state.pending is request:
            self.state.pending = None
            self.state.status = SuggestionStatus.SUCCESS
            self.state.last_error = None
            self.state.last_response = completion.raw
        self.usage.record(settings.model, completion.prompt_tokens, completion.completion_tokens)
        self.apply_completion(request.change_stamp, completion.text)
        self._notify()

    def _fail(self, request: PendingRequest, message: str, response: Any) -> None:
        if self.state.pending is request:
            self.state.pending = None
            self.state.status = SuggestionStatus.ERROR
            self.state.last_error = message
            self.state.last_response = response
        self._notify()

    def apply_completion(self, stamp: int, text: str) -> bool:
        """Insert ``text`` as ghost text if the edit it answers is still the latest."""
        if not self.buffer.selection.collapsed:
            return False
        if stamp != self.state.last_change:
            logger.debug("Dropping stale suggestion for change %d (latest %d)", stamp, self.state.last_change)
            return False
        if not text:
            return False
        self.buffer.insert_suggestion(text)
        return True

    # ── Settings & teardown ──────────────────────────────────────

    def update_settings(self, **changes: Any) -> None:
        for name, value in changes.items():
            if not hasattr(self.settings, name):
                raise AttributeError(f"Unknown suggestion setting: {name}")
            setattr(self.settings, name, value)
        self._notify()

    async def drain(self) -> None:
        """Wait until no timer or request is outstanding."""
        while True:
            tasks = [self._timer]
            if self.state.pending is not None:
                tasks.append(self.state.pending.cancel_token)
            live = [t for t in tasks if t is not None and not t.done()]
            if not live:
                return
            await asyncio.gather(*live, return_exceptions=True)

    async def close(self) -> None:
        self._cancel_timer()
        self._cancel_request()
        await self.gateway.aclose()
