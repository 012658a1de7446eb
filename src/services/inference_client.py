"""Client for the hosted text-generation API.

The client exchanges the configured API key for an IAM bearer token,
then issues one generation request per prompt using a fixed greedy
decoding configuration.  Every per-call failure is converted into an
:class:`InferenceError` so the gateway can treat timeouts, upstream
errors and malformed payloads identically.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx
from loguru import logger

from ..config.service_config import ServiceConfig
from ..utils.api_client import create_async_client
from ..utils.error_handler import InferenceError, InferenceStartupError

DECODING_METHOD = "greedy"
MAX_NEW_TOKENS = 300
MIN_NEW_TOKENS = 1
REPETITION_PENALTY = 1.05

IAM_GRANT_TYPE = "urn:ibm:params:oauth:grant-type:apikey"
# Refresh the bearer token this many seconds before it expires.
TOKEN_REFRESH_MARGIN = 60.0


class InferenceClient:
    """Single point of contact with the remote generation service.

    One instance is created at startup and shared by every request
    handler.  The only mutable state is the cached bearer token, whose
    refresh is serialised by an :class:`asyncio.Lock`.
    """

    def __init__(
        self,
        config: ServiceConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self._owns_http_client = http_client is None
        self._http = http_client or create_async_client(config.request_timeout)
        self._token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "decoding_method": DECODING_METHOD,
            "max_new_tokens": MAX_NEW_TOKENS,
            "min_new_tokens": MIN_NEW_TOKENS,
            "repetition_penalty": REPETITION_PENALTY,
        }

    async def connect(self) -> None:
        """Authenticate against the token service.

        Raises
        ------
        InferenceStartupError
            If the credentials are rejected or the service is unreachable.
        """
        try:
            await self._refresh_token()
        except Exception as exc:
            logger.error("Inference client initialisation failed: {}", exc)
            raise InferenceStartupError(
                "Unable to initialise the inference client"
            ) from exc
        logger.info(
            "Inference client ready (model={}, endpoint={})",
            self.config.model_id,
            self.config.base_url,
        )

    async def generate(self, prompt: str) -> str:
        """Return the first generated text for ``prompt``, stripped.

        Raises
        ------
        InferenceError
            On any transport, status or payload failure.  The call is
            attempted exactly once.
        """
        logger.debug("Generating reply for prompt of {} characters", len(prompt))
        try:
            token = await self._get_token()
            response = await self._http.post(
                self.config.generation_url,
                params={"version": self.config.api_version},
                headers={"Authorization": f"Bearer {token}"},
                json={
                    "input": prompt,
                    "model_id": self.config.model_id,
                    "project_id": self.config.project_id,
                    "parameters": self.parameters,
                },
            )
            response.raise_for_status()
            return extract_generated_text(response.json())
        except Exception as exc:
            raise InferenceError("Text generation failed") from exc

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    def _token_is_fresh(self) -> bool:
        return (
            self._token is not None
            and time.monotonic() < self._token_expires_at - TOKEN_REFRESH_MARGIN
        )

    async def _get_token(self) -> str:
        if self._token_is_fresh():
            return self._token  # type: ignore[return-value]
        async with self._token_lock:
            if not self._token_is_fresh():
                await self._refresh_token()
            return self._token  # type: ignore[return-value]

    async def _refresh_token(self) -> None:
        response = await self._http.post(
            self.config.iam_url,
            data={
                "grant_type": IAM_GRANT_TYPE,
                "apikey": self.config.api_key.get_secret_value(),
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        response.raise_for_status()
        body = response.json()
        token = body["access_token"]
        if not isinstance(token, str) or not token:
            raise ValueError("Token response did not contain an access token")
        expires_in = float(body.get("expires_in", 3600))
        self._token = token
        self._token_expires_at = time.monotonic() + expires_in
        logger.debug("Obtained access token valid for {} seconds", int(expires_in))


def extract_generated_text(payload: Any) -> str:
    """Pull the first candidate's ``generated_text`` out of a response body."""
    results = payload.get("results") if isinstance(payload, dict) else None
    if not results:
        raise ValueError("Generation response contained no results")
    first = results[0]
    text = first.get("generated_text") if isinstance(first, dict) else None
    if not isinstance(text, str):
        raise ValueError("Generation result is missing generated_text")
    return text.strip()
