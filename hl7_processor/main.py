from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.routes import router
from .config import BuildInfo, Settings, get_settings
from .core.correlation_middleware import CorrelationIDMiddleware
from .core.exceptions import ErrorCode, HL7Error, get_error_message
from .core.metrics import HL7Metrics
from .core.schemas import APIResponse
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    status.HTTP_404_NOT_FOUND: ErrorCode.HTTP_NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: ErrorCode.HTTP_METHOD_NOT_ALLOWED,
}


def _envelope(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse(success=False, message=message).model_dump(exclude_none=True),
        headers=headers,
    )


def create_app(settings: Optional[Settings] = None, build_info: Optional[BuildInfo] = None) -> FastAPI:
    settings = settings or get_settings()
    build_info = build_info or settings.build_info()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="HL7 Processor",
        description="""
        ## HL7 v2 Message Processor

        Parses and generates pipe-delimited HL7 v2 messages.

        ### Endpoints:
        - **POST /parse**: raw HL7 v2 text in, JSON segments out
        - **GET /generate**: sample ADT^A01 message as JSON or wire text
        - **POST /serialize**: JSON segments in, HL7 v2 text out

        ### Response envelope:
        `{"success": bool, "message": str, "data": {"segments": [...]}}`
        """,
        version=build_info.version,
        openapi_tags=[
            {"name": "hl7", "description": "HL7 v2 parsing and generation"},
            {"name": "health", "description": "Health check and version endpoints"},
            {"name": "metrics", "description": "Prometheus metrics for monitoring"},
        ],
    )
    app.state.settings = settings
    app.state.build_info = build_info
    app.state.metrics = HL7Metrics()

    @app.exception_handler(HL7Error)
    async def hl7_error_handler(request: Request, exc: HL7Error):
        logger.warning("HL7 message rejected", extra={"extra": exc.to_dict()})
        return _envelope(status.HTTP_400_BAD_REQUEST, f"Error parsing HL7 message: {exc.detail}")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code = HTTP_ERROR_CODES.get(exc.status_code)
        message = get_error_message(code) if code else str(exc.detail)
        return _envelope(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        message = f"{get_error_message(ErrorCode.HTTP_INVALID_BODY)}: {errors}"
        return _envelope(422, message)

    app.add_middleware(CorrelationIDMiddleware)
    app.include_router(router)

    logger.info(
        "HL7 processor initialised",
        extra={"extra": {"service": settings.SERVICE_NAME, "version": build_info.version, "build_date": build_info.build_date}}
    )
    return app


def run() -> None:
    """Console entry point: print the banner and serve the API."""
    import uvicorn

    settings = get_settings()
    build_info = settings.build_info()
    print(f"HL7 Processor v{build_info.version} (Built: {build_info.build_date})")

    application = create_app(settings=settings, build_info=build_info)
    logger.info(f"Starting server on {settings.HL7_HOST}:{settings.HL7_PORT}")
    uvicorn.run(application, host=settings.HL7_HOST, port=settings.HL7_PORT, log_config=None)


app = create_app()


if __name__ == "__main__":
    run()
