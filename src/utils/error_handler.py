"""Error types shared by the gateway and the inference client."""

from __future__ import annotations


# Returned verbatim to the browser for every upstream failure.
GENERIC_ERROR_MESSAGE = "An internal error occurred while processing the request."


class InferenceError(Exception):
    """Raised when a generation call fails for any reason.

    Timeouts, transport errors, non-success responses and malformed
    payloads all surface as this single category.  The original cause is
    kept as ``__cause__`` for logging.
    """

    pass


class InferenceStartupError(InferenceError):
    """Raised when the inference client cannot be initialised."""

    pass
