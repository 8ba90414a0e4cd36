"""WebSocket handlers for the application."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Annotated

from fastapi import Depends, WebSocket, WebSocketDisconnect, status
from pydantic import BaseModel, ValidationError
from starlette.websockets import WebSocketState

from apollo_chat.config import Settings, get_settings
from apollo_chat.dependencies import get_conversation_session
from apollo_chat.exceptions import SessionConfigError
from apollo_chat.models import (
    ClearFrame,
    ConfigureFrame,
    CopiedResponse,
    CopyFrame,
    DismissErrorFrame,
    DraftFrame,
    ErrorResponse,
    SendFrame,
    StateResponse,
    client_frame_adapter,
)
from apollo_chat.services.conversation import ConversationSession

logger = logging.getLogger(__name__)


async def websocket_endpoint(
    websocket: WebSocket,
    session: Annotated[ConversationSession, Depends(get_conversation_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """One connection drives one conversation session."""

    await websocket.accept()
    should_close = True
    logger.info(
        "WebSocket connection accepted",
        extra={"client": _client_repr(websocket)},
    )

    outbox: asyncio.Queue[BaseModel] = asyncio.Queue()
    session.set_listener(lambda s: outbox.put_nowait(_state_frame(s)))
    writer = asyncio.create_task(_drain(websocket, outbox))
    turns: set[asyncio.Task[bool]] = set()
    outbox.put_nowait(_state_frame(session))

    try:
        while True:
            try:
                raw = await asyncio.wait_for(
                    websocket.receive_text(), timeout=settings.ws_inactivity_timeout
                )
            except asyncio.TimeoutError:
                # a queued turn has not set in_flight yet
                if turns or session.in_flight:
                    continue
                logger.info(
                    "WebSocket inactive; closing",
                    extra={"client": _client_repr(websocket)},
                )
                await websocket.close(code=status.WS_1000_NORMAL_CLOSURE)
                should_close = False
                break
            except WebSocketDisconnect:
                logger.info(
                    "WebSocket client disconnected",
                    extra={"client": _client_repr(websocket)},
                )
                should_close = False
                break

            try:
                frame = client_frame_adapter.validate_json(raw)
            except ValidationError as exc:
                outbox.put_nowait(
                    ErrorResponse(error="invalid_payload", detail=_first_error(exc))
                )
                continue

            if isinstance(frame, SendFrame):
                text = session.draft if frame.text is None else frame.text
                if len(text) > settings.max_text_length:
                    outbox.put_nowait(
                        ErrorResponse(
                            error="validation_error",
                            detail=f"Text length exceeds limit of {settings.max_text_length} characters.",
                        )
                    )
                    continue
                if turns or not session.can_send(text):
                    continue
                turn = asyncio.create_task(session.send_turn(text))
                turns.add(turn)
                turn.add_done_callback(turns.discard)
            elif isinstance(frame, DraftFrame):
                session.update_draft(frame.text)
            elif isinstance(frame, ClearFrame):
                session.clear_session()
            elif isinstance(frame, DismissErrorFrame):
                session.dismiss_error()
            elif isinstance(frame, CopyFrame):
                try:
                    content = session.copy_message(frame.index)
                except IndexError as exc:
                    outbox.put_nowait(ErrorResponse(error="validation_error", detail=str(exc)))
                    continue
                outbox.put_nowait(CopiedResponse(index=frame.index, content=content))
            elif isinstance(frame, ConfigureFrame):
                try:
                    session.configure(
                        model=frame.model,
                        system_prompt=frame.system_prompt,
                        max_tokens=frame.max_tokens,
                    )
                except SessionConfigError as exc:
                    outbox.put_nowait(ErrorResponse(error=exc.code, detail=exc.message))
    finally:
        for turn in list(turns):
            turn.cancel()
        if turns:
            await asyncio.gather(*turns, return_exceptions=True)
        session.set_listener(None)
        writer.cancel()
        await asyncio.gather(writer, return_exceptions=True)
        if should_close and websocket.application_state == WebSocketState.CONNECTED:
            with suppress(RuntimeError, WebSocketDisconnect):
                await websocket.close()
        logger.info(
            "WebSocket connection closed",
            extra={"client": _client_repr(websocket)},
        )


async def _drain(websocket: WebSocket, outbox: asyncio.Queue[BaseModel]) -> None:
    """Single writer for the connection; frames go out in the order queued."""

    while True:
        frame = await outbox.get()
        try:
            await websocket.send_text(frame.model_dump_json())
        except Exception:
            logger.warning(
                "WebSocket send failed; closing",
                exc_info=True,
                extra={"client": _client_repr(websocket)},
            )
            with suppress(Exception):
                await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
            return
        finally:
            outbox.task_done()


def _state_frame(session: ConversationSession) -> StateResponse:
    return StateResponse(type="state", **session.snapshot().model_dump())


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid JSON payload."
    return errors[0].get("msg", "Invalid JSON payload.")


def _client_repr(websocket: WebSocket) -> str:
    """Render the remote client for logging purposes."""

    client = websocket.client
    if client is None:
        return "unknown"
    return f"{client.host}:{client.port}"
