"""Standardized API response helpers.

Every endpoint returns the same envelope:
    {"success": <bool>, "data": <payload>, "message": <str>}

``data`` is omitted on failures and ``message`` is omitted when there is
nothing to say.  Use success_response() in routes; error_response() is used
by the exception handlers in qyra.main.
"""

from typing import Any, Optional

from fastapi import status
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """Wrap a payload in the success envelope.

    Args:
        data: Serializable payload. ``None`` is sent as ``"data": null``.
        message: Optional human-readable message.
        status_code: HTTP status code (201 for creations).
    """
    body: dict = {"success": True, "data": data}
    if message:
        body["message"] = message
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def error_response(
    message: str,
    status_code: int,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Build the failure envelope."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )
