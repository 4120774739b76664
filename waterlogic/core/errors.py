# waterlogic/core/errors.py
from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from waterlogic.core.exceptions import WaterLogicError

logger = logging.getLogger(__name__)

__all__ = ["register_exception_handlers"]


def _problem(status_code: int, code: str, message: str, detail: Any | None = None) -> JSONResponse:
    """{code, message, detail?} 형태의 application/problem+json 응답"""
    payload: dict[str, Any] = {"code": code, "message": message}
    if detail is not None:
        payload["detail"] = detail
    return JSONResponse(
        status_code=status_code,
        content=payload,
        media_type="application/problem+json",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    전역 예외 핸들러.

    - WaterLogicError 계열: 예외가 가진 code / status_code 그대로
      (INVALID_SPECIFICATION 422, NO_FEASIBLE_SOLUTION 409, NUMERIC_GUARD 500)
    - RequestValidationError: 스키마 검증 실패 → INVALID_INPUT (422)
    - HTTPException: HTTP_ERROR (404 등)
    - 그 외: INTERNAL_SERVER_ERROR (500)
    """

    @app.exception_handler(WaterLogicError)
    async def engine_error_handler(request: Request, exc: WaterLogicError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.info
        log("%s: %s %s -> %s", exc.code, request.method, request.url.path, exc)
        return _problem(exc.status_code, exc.code, str(exc), exc.detail)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"loc": e.get("loc"), "msg": e.get("msg"), "type": e.get("type")}
            for e in exc.errors()
        ]
        logger.info(
            "Request validation failed: %s %s (%d errors)",
            request.method,
            request.url.path,
            len(errors),
        )
        return _problem(422, "INVALID_INPUT", "입력 검증 실패", errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        logger.warning(
            "HTTPException: %s %s -> %d (%s)",
            request.method,
            request.url.path,
            exc.status_code,
            exc.detail,
        )
        return _problem(exc.status_code, "HTTP_ERROR", str(exc.detail) if exc.detail else "HTTP error")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception: %s %s", request.method, request.url.path, exc_info=exc)
        return _problem(500, "INTERNAL_SERVER_ERROR", "알 수 없는 오류가 발생했습니다.")
