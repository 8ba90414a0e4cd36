"""Conversation session: transcript, request parameters and the send-turn cycle."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Protocol

from apollo_chat.config import Settings
from apollo_chat.exceptions import ChatServiceError, SessionConfigError
from apollo_chat.models import (
    MAX_MAX_TOKENS,
    MIN_MAX_TOKENS,
    SEED_MESSAGE,
    WARNING_MARKER,
    Message,
    SessionSnapshot,
    is_known_model,
)

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = (
    "Rate limit exceeded. Please wait a moment before sending another message."
)
GENERIC_API_ERROR = "API request failed"
UNEXPECTED_FORMAT_ERROR = "Unexpected API response format"

_RATE_LIMIT_TYPES = frozenset({"exceeded_limit", "rate_limit_error"})


class MessagesClient(Protocol):
    async def create_message(self, payload: dict[str, Any]) -> Any: ...


Listener = Callable[["ConversationSession"], None]


def extract_reply_text(data: Any) -> str | None:
    """Return the first text block of a messages response, if any."""

    if not isinstance(data, dict):
        return None
    content = data.get("content")
    if not isinstance(content, list):
        return None
    for block in content:
        if isinstance(block, dict) and isinstance(block.get("text"), str):
            return block["text"]
    return None


def describe_upstream_error(data: Any) -> str | None:
    """Map an upstream error object to the text shown to the user."""

    if not isinstance(data, dict) or not data.get("error"):
        return None

    error = data["error"]
    error_type = error.get("type") if isinstance(error, dict) else None
    if data.get("type") in _RATE_LIMIT_TYPES or error_type in _RATE_LIMIT_TYPES:
        return RATE_LIMIT_MESSAGE

    if isinstance(error, dict):
        message = error.get("message")
    elif isinstance(error, str):
        message = error
    else:
        message = None
    return message or GENERIC_API_ERROR


class ConversationSession:
    """One user's chat: a linear transcript plus a single in-flight request.

    ``send_turn`` is the only operation that talks to the network. A second
    call while a request is pending is dropped, and the in-flight flag is
    released on every exit path.
    """

    def __init__(
        self,
        client: MessagesClient,
        settings: Settings,
        *,
        listener: Listener | None = None,
    ) -> None:
        self._client = client
        self._throttle = settings.throttle_delay
        self._copy_feedback = settings.copy_feedback_seconds
        self._listener = listener

        self._messages: list[Message] = [SEED_MESSAGE]
        self._in_flight = False
        self._error: str | None = None
        self._copied_index: int | None = None
        self._copied_until = 0.0

        self.draft = ""
        self.model = settings.default_model
        self.system_prompt = settings.system_prompt
        self.max_tokens = settings.max_tokens

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def copied_index(self) -> int | None:
        if self._copied_index is not None and time.monotonic() >= self._copied_until:
            self._copied_index = None
        return self._copied_index

    def set_listener(self, listener: Listener | None) -> None:
        self._listener = listener

    def can_send(self, draft_text: str | None = None) -> bool:
        text = self.draft if draft_text is None else draft_text
        return bool(text.strip()) and not self._in_flight

    def build_payload(self) -> dict[str, Any]:
        """Request body for the current transcript, without seed entries."""

        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": self.system_prompt,
            "messages": [m.as_payload() for m in self._messages if not m.seed],
        }

    async def send_turn(self, draft_text: str | None = None) -> bool:
        """Send one user message and record the reply.

        Returns ``False`` without touching the transcript when the text is
        blank or a request is already pending.
        """

        text = self.draft if draft_text is None else draft_text
        if not self.can_send(text):
            return False

        self._in_flight = True
        try:
            self._messages.append(Message(role="user", content=text))
            self.draft = ""
            self._error = None
            payload = self.build_payload()
            self._notify()

            await asyncio.sleep(self._throttle)
            try:
                data = await self._client.create_message(payload)
            except ChatServiceError as exc:
                logger.warning("Messages request failed", extra={"detail": exc.message})
                self._fail(f"Connection error: {exc.message}")
            except Exception as exc:
                logger.exception("Messages request raised unexpectedly")
                self._fail(f"Connection error: {exc}")
            else:
                self._record_reply(data)
        finally:
            self._in_flight = False
            self._notify()
        return True

    def _record_reply(self, data: Any) -> None:
        reply = extract_reply_text(data)
        if reply is not None:
            self._messages.append(Message(role="assistant", content=reply))
            self._error = None
            return

        upstream_error = describe_upstream_error(data)
        if upstream_error is not None:
            logger.info("Upstream returned an error", extra={"detail": upstream_error})
            self._fail(upstream_error)
            return

        logger.error("Unexpected messages response", extra={"raw_response": data})
        self._error = UNEXPECTED_FORMAT_ERROR

    def _fail(self, message: str) -> None:
        self._error = message
        self._messages.append(
            Message(role="assistant", content=f"{WARNING_MARKER} {message}")
        )

    def clear_session(self) -> None:
        """Reset the transcript to the welcome message."""

        self._messages = [SEED_MESSAGE]
        self._error = None
        self._copied_index = None
        self._notify()

    def dismiss_error(self) -> None:
        self._error = None
        self._notify()

    def update_draft(self, text: str) -> None:
        self.draft = text

    def copy_message(self, index: int) -> str:
        """Return a message's content for the clipboard and flag it as copied."""

        if not 0 <= index < len(self._messages):
            raise IndexError(f"no message at index {index}")
        self._copied_index = index
        self._copied_until = time.monotonic() + self._copy_feedback
        self._notify()
        return self._messages[index].content

    def configure(
        self,
        *,
        model: str | None = None,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
    ) -> None:
        """Change request parameters; they apply from the next turn."""

        if model is not None and not is_known_model(model):
            raise SessionConfigError(f"Unknown model: {model}")
        if max_tokens is not None and not MIN_MAX_TOKENS <= max_tokens <= MAX_MAX_TOKENS:
            raise SessionConfigError(
                f"max_tokens must be between {MIN_MAX_TOKENS} and {MAX_MAX_TOKENS}"
            )

        if model is not None:
            self.model = model
        if system_prompt is not None:
            self.system_prompt = system_prompt
        if max_tokens is not None:
            self.max_tokens = max_tokens
        self._notify()

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            messages=list(self._messages),
            in_flight=self._in_flight,
            draft=self.draft,
            model=self.model,
            system_prompt=self.system_prompt,
            max_tokens=self.max_tokens,
            error=self._error,
            copied_index=self.copied_index,
            can_send=self.can_send(),
        )

    def _notify(self) -> None:
        if self._listener is not None:
            self._listener(self)
