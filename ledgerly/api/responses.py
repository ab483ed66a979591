"""Flat error envelope shared by the v1 handlers"""

from fastapi.responses import JSONResponse


def error_response(status_code: int, msg: str, error: str | None = None) -> JSONResponse:
    """Build a {"msg", "error"} response; error is omitted when not given"""
    content = {"msg": msg}
    if error is not None:
        content["error"] = error
    return JSONResponse(status_code=status_code, content=content)
