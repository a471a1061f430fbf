from __future__ import annotations

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST

from ..core.codec import parse_bytes, serialize
from ..core.exceptions import ErrorCode, get_error_message
from ..core.sample import generate_sample_message
from ..core.schemas import APIResponse, MessageSchema, VersionInfo
from .deps import get_build_info, get_metrics, get_settings_from_app

logger = logging.getLogger(__name__)

router = APIRouter()

HL7_MEDIA_TYPE = "application/hl7-v2"

OutputFormat = Literal["json", "text"]


async def _read_body(request: Request, limit: int) -> Optional[bytes]:
    """Read the request body, or return None once it exceeds ``limit`` bytes."""
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > limit:
        return None

    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            return None
        chunks.append(chunk)
    return b"".join(chunks)


@router.post(
    "/parse",
    response_model=APIResponse,
    response_model_exclude_none=True,
    tags=["hl7"],
    summary="Parse HL7 v2 Message",
    description="""
    Parses a raw HL7 v2 message into segments and fields.

    Segments are separated by `\\r`, fields by `|`. Component (`^`),
    sub-component (`&`), repetition (`~`) and escape (`\\`) characters are
    returned verbatim inside field values.

    The response uses lower-case keys (`segments`, `type`, `fields`).
    `/serialize` also accepts the capitalised `Segments` / `Type` / `Fields`
    keys emitted by the legacy processor.

    ### Usage Example:
    ```bash
    printf 'MSH|^~\\\\&|APP|FAC\\rPID||123||Doe^John\\r' | \\
        curl -X POST "http://localhost:8080/parse" --data-binary @-
    ```
    """,
    responses={
        400: {"description": "Message could not be parsed", "model": APIResponse},
        413: {"description": "Message exceeds MAX_MESSAGE_BYTES", "model": APIResponse},
    }
)
async def parse_hl7(
    request: Request,
    settings=Depends(get_settings_from_app),
    metrics=Depends(get_metrics),
):
    """Parse the request body as an HL7 v2 message."""
    body = await _read_body(request, settings.MAX_MESSAGE_BYTES)
    if body is None:
        logger.warning(
            "Rejected oversized HL7 message",
            extra={"extra": {"limit": settings.MAX_MESSAGE_BYTES}}
        )
        return JSONResponse(
            status_code=413,
            content=APIResponse(
                success=False,
                message=get_error_message(ErrorCode.HTTP_PAYLOAD_TOO_LARGE),
            ).model_dump(exclude_none=True),
        )

    with metrics.time_parse():
        message = parse_bytes(body)
    metrics.record_segments(message)

    logger.info("HL7 message parsed", extra={"extra": {"segment_count": len(message.segments)}})
    return APIResponse(
        success=True,
        message="HL7 message parsed successfully",
        data=MessageSchema.from_message(message),
    )


@router.get(
    "/generate",
    response_model=APIResponse,
    response_model_exclude_none=True,
    tags=["hl7"],
    summary="Generate Sample HL7 v2 Message",
    description="""
    Returns a sample ADT^A01 message (MSH + PID) stamped with the current time.

    - `format=json` (default): JSON envelope with the parsed structure
    - `format=text`: HL7 v2 wire text
    """,
    responses={
        200: {
            "content": {
                HL7_MEDIA_TYPE: {
                    "example": "MSH|^~\\&|SENDING_APP|SENDING_FACILITY|RECEIVING_APP|RECEIVING_FACILITY|20240101120000||ADT^A01|MSG00001|P|2.5\rPID||12345|||Doe^John||19800101|M\r"
                }
            }
        }
    }
)
def generate_hl7(format: OutputFormat = "json", metrics=Depends(get_metrics)):
    message = generate_sample_message()
    metrics.record_generated(format)

    if format == "text":
        return PlainTextResponse(serialize(message), media_type=HL7_MEDIA_TYPE)

    return APIResponse(
        success=True,
        message="HL7 message generated successfully",
        data=MessageSchema.from_message(message),
    )


@router.post(
    "/serialize",
    tags=["hl7"],
    summary="Serialize HL7 v2 Message",
    description="Converts the JSON form of a message back into HL7 v2 wire text.",
    response_class=PlainTextResponse,
)
def serialize_hl7(body: MessageSchema) -> PlainTextResponse:
    return PlainTextResponse(serialize(body.to_message()), media_type=HL7_MEDIA_TYPE)


@router.get(
    "/health",
    response_model=APIResponse,
    response_model_exclude_none=True,
    tags=["health"],
    summary="Health Check",
)
def health() -> APIResponse:
    """Health check endpoint to verify service availability."""
    return APIResponse(success=True, message="Service is healthy")


@router.get(
    "/version",
    response_model=VersionInfo,
    tags=["health"],
    summary="Service Version",
    description="Returns the version and build date the service was started with",
)
def version(build_info=Depends(get_build_info)) -> VersionInfo:
    return VersionInfo(version=build_info.version, buildDate=build_info.build_date)


@router.get(
    "/metrics",
    tags=["metrics"],
    summary="Prometheus Metrics",
    response_class=Response,
)
def metrics_endpoint(metrics=Depends(get_metrics)) -> Response:
    return Response(content=metrics.export(), media_type=CONTENT_TYPE_LATEST)
