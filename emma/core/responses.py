from typing import Any, Mapping, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(
    data: Any = None,
    *,
    message: Optional[str] = None,
    count: Optional[int] = None,
    status_code: int = status.HTTP_200_OK,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    body = {"success": True, "data": data}
    if count is not None:
        body["count"] = count
    if message:
        body["message"] = message
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def error_response(
    status_code: int,
    error: str,
    *,
    details: Any = None,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    body = {"success": False, "error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)
