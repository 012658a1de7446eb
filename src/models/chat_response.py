"""Response model for the chat API."""

from pydantic import BaseModel, Field


class ChatResponse(BaseModel):
    """Represents the assistant's reply to a chat request."""

    reply: str = Field(
        ...,
        description="Generated text with surrounding whitespace removed.",
    )
