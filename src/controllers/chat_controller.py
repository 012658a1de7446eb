"""API controller for chat operations.

Defines the ``/api/chat`` route.  The inference client is resolved from
application state through :func:`get_inference_client` so tests can
substitute a stub with ``app.dependency_overrides``.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from loguru import logger

from ..models.chat_request import ChatRequest
from ..models.chat_response import ChatResponse
from ..services.inference_client import InferenceClient
from ..utils.error_handler import GENERIC_ERROR_MESSAGE, InferenceError

router = APIRouter(prefix="/api", tags=["Chat"])


def get_inference_client(request: Request) -> InferenceClient:
    """Return the client handle created at startup."""
    return request.app.state.inference_client


@router.post("/chat", response_model=ChatResponse)
async def chat_endpoint(
    request: ChatRequest,
    client: InferenceClient = Depends(get_inference_client),
) -> ChatResponse:
    """Forward the message to the inference service and return its reply.

    Any failure is reported as a 500 with a fixed message; the cause is
    only written to the log.
    """
    try:
        logger.info("Received chat request ({} characters)", len(request.message))
        reply = await client.generate(request.message)
        logger.info("Reply generated successfully")
        return ChatResponse(reply=reply)
    except InferenceError as exc:
        logger.exception("Inference call failed: {}", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=GENERIC_ERROR_MESSAGE,
        ) from exc
    except Exception as exc:
        logger.exception("Unhandled exception during chat processing")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=GENERIC_ERROR_MESSAGE,
        ) from exc
