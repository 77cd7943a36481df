"""Request bodies accepted by the HTTP API."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ChatRequest(BaseModel):
    """Body of POST /api/chat."""

    message: str = Field(..., min_length=1, max_length=2000)
    session_id: Optional[str] = Field(default=None, alias="sessionId")

    model_config = {"populate_by_name": True}

    @field_validator("message", mode="before")
    @classmethod
    def _strip_message(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("session_id", mode="before")
    @classmethod
    def _blank_session_is_absent(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class CreateSessionRequest(BaseModel):
    """Body of POST /api/sessions."""

    owner_id: Optional[str] = Field(default=None, alias="ownerId")

    model_config = {"populate_by_name": True}
