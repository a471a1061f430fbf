"""
Correlation ID tracking for request tracing.

The ID of the request being handled lives in a context variable so log
records emitted anywhere during the request can carry it.
"""

from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar
from typing import Optional

from fastapi import Request

logger = logging.getLogger(__name__)

CORRELATION_HEADERS = ("X-Correlation-ID", "X-Request-ID")

correlation_id_context: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id() -> Optional[str]:
    return correlation_id_context.get()


def set_correlation_id(correlation_id: Optional[str]) -> None:
    correlation_id_context.set(correlation_id)


def extract_correlation_id_from_request(request: Request) -> str:
    """Use the caller's correlation ID if one was sent, otherwise mint one."""
    correlation_id = None
    for header in CORRELATION_HEADERS:
        correlation_id = request.headers.get(header)
        if correlation_id:
            break

    if not correlation_id:
        correlation_id = generate_correlation_id()
        logger.debug(f"Generated new correlation ID: {correlation_id}")

    set_correlation_id(correlation_id)
    return correlation_id
