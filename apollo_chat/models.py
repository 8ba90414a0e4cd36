"""Pydantic models shared across application layers."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, computed_field

MIN_MAX_TOKENS = 100
MAX_MAX_TOKENS = 8000

WARNING_MARKER = "⚠️"

SEED_CONTENT = (
    "🚀 **BETA** - Welcome to Apollo AI! This is an experimental interface with "
    "full Claude API access. Features may be unstable."
)


class Message(BaseModel):
    """One transcript entry."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
    seed: bool = Field(default=False, description="Welcome entry, never sent upstream.")

    def as_payload(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_warning(self) -> bool:
        """Inline error entry, rendered differently from replies."""

        return self.role == "assistant" and self.content.startswith(WARNING_MARKER)


SEED_MESSAGE = Message(role="assistant", content=SEED_CONTENT, seed=True)


class ModelOption(BaseModel):
    """A selectable upstream model."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


AVAILABLE_MODELS: tuple[ModelOption, ...] = (
    ModelOption(id="claude-sonnet-4-20250514", name="Claude Sonnet 4"),
    ModelOption(id="claude-opus-4-20250514", name="Claude Opus 4"),
    ModelOption(id="claude-3-5-sonnet-20241022", name="Claude 3.5 Sonnet"),
)


def is_known_model(model_id: str) -> bool:
    return any(option.id == model_id for option in AVAILABLE_MODELS)


class SessionSnapshot(BaseModel):
    """Read-only view of a conversation session for rendering."""

    messages: list[Message]
    in_flight: bool
    draft: str
    model: str
    system_prompt: str
    max_tokens: int
    error: str | None = None
    copied_index: int | None = None
    can_send: bool


class SendFrame(BaseModel):
    """Submit a turn; without ``text`` the stored draft is sent."""

    action: Literal["send"]
    text: str | None = None


class DraftFrame(BaseModel):
    action: Literal["draft"]
    text: str


class ClearFrame(BaseModel):
    action: Literal["clear"]


class CopyFrame(BaseModel):
    action: Literal["copy"]
    index: int


class DismissErrorFrame(BaseModel):
    action: Literal["dismiss_error"]


class ConfigureFrame(BaseModel):
    """Change request parameters for subsequent turns."""

    action: Literal["configure"]
    model: str | None = None
    system_prompt: str | None = None
    max_tokens: int | None = None


ClientFrame = Annotated[
    Union[SendFrame, DraftFrame, ClearFrame, CopyFrame, DismissErrorFrame, ConfigureFrame],
    Field(discriminator="action"),
]

client_frame_adapter: TypeAdapter[ClientFrame] = TypeAdapter(ClientFrame)


class StateResponse(SessionSnapshot):
    """State frame pushed to WebSocket clients after every change."""

    type: Literal["state"] = "state"


class CopiedResponse(BaseModel):
    """Content the client should place on its clipboard."""

    type: Literal["copied"] = "copied"
    index: int
    content: str


class ErrorResponse(BaseModel):
    """Error frame returned to WebSocket clients."""

    type: Literal["error"] = "error"
    error: str
    detail: str | None = None


class ModelsResponse(BaseModel):
    """Configuration surface exposed to the presentation layer."""

    models: list[ModelOption]
    default_model: str
    system_prompt: str
    max_tokens: int
    min_max_tokens: int = MIN_MAX_TOKENS
    max_max_tokens: int = MAX_MAX_TOKENS
