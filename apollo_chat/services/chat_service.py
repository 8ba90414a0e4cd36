"""Adapter for the upstream messages endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from apollo_chat.config import Settings
from apollo_chat.exceptions import ChatServiceError

logger = logging.getLogger(__name__)


class ChatService:
    """Issues one JSON POST per turn and hands back the decoded body.

    Error bodies are returned, not raised: the caller decides how an upstream
    ``{"error": {...}}`` object is shown. Only a failed call (network trouble
    or a body that is not JSON) raises ``ChatServiceError``.
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._settings.anthropic_api_key:
            headers["x-api-key"] = self._settings.anthropic_api_key
            headers["anthropic-version"] = self._settings.anthropic_version
        return headers

    async def create_message(self, payload: dict[str, Any]) -> Any:
        """Send a messages request and return the decoded JSON response."""

        try:
            response = await self._client.post(
                self._settings.messages_endpoint,
                headers=self._headers(),
                json=payload,
                timeout=self._settings.chat_timeout,
            )
        except httpx.TimeoutException as exc:
            logger.warning("Messages request timed out", exc_info=exc)
            raise ChatServiceError(str(exc) or "request timed out") from exc
        except httpx.HTTPError as exc:
            logger.exception("Unexpected messages HTTP error")
            raise ChatServiceError(str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            logger.warning(
                "Messages endpoint returned an error status",
                extra={
                    "status_code": response.status_code,
                    "response_text": response.text,
                },
            )

        try:
            return response.json()
        except ValueError as exc:
            logger.error(
                "Malformed messages response",
                extra={
                    "status_code": response.status_code,
                    "response_text": response.text,
                },
            )
            raise ChatServiceError(
                f"invalid JSON in response: {exc}",
                status_code=response.status_code,
            ) from exc
