"""Dependency providers for the FastAPI application."""

import httpx
from fastapi import Depends
from starlette.requests import HTTPConnection

from apollo_chat.config import Settings, get_settings
from apollo_chat.services.chat_service import ChatService
from apollo_chat.services.conversation import ConversationSession


async def get_http_client(connection: HTTPConnection) -> httpx.AsyncClient:
    """Retrieve the shared AsyncClient from application state."""

    return connection.app.state.http_client  # type: ignore[return-value]


async def get_chat_service(
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> ChatService:
    """Dependency provider for ChatService."""

    return ChatService(client=client, settings=settings)


async def get_conversation_session(
    chat_service: ChatService = Depends(get_chat_service),
    settings: Settings = Depends(get_settings),
) -> ConversationSession:
    """A fresh session per connection; nothing is shared between them."""

    return ConversationSession(chat_service, settings)
