"""Request model for the chat API."""

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Represents a request payload for a chat message.

    The ``message`` field contains the user's prompt and is forwarded
    to the inference service unchanged.  It must be a non-empty string;
    Pydantic rejects missing, empty or non-string values with a 422
    response before any upstream call is made.
    """

    message: str = Field(
        ...,
        min_length=1,
        description="The user's message content."
    )
