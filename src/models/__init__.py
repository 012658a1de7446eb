"""Expose the API model classes at the package level.

Importing these classes here allows consumers to write concise imports like::

    from src.models import ChatRequest, ChatResponse
"""

from .chat_request import ChatRequest  # noqa: F401
from .chat_response import ChatResponse  # noqa: F401
