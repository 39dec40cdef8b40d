"""Success envelope helpers shared by every route module."""

from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(
    data: Any = None,
    message: Optional[str] = None,
    **extra: Any
) -> dict:
    """
    Build a ``{status: "success", message?, data?}`` body.

    Pydantic models inside ``data`` are serialized by alias (camelCase).
    Extra keyword arguments become top-level siblings of ``data``.
    """
    body: dict = {"status": "success"}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonable_encoder(body, by_alias=True)


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
    **extra: Any
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope(data=data, message=message, **extra)
    )
