"""
HTTP client for a running HL7 processor.

Sends messages to ``/parse`` and fetches samples from ``/generate``, decoding
the JSON envelope into :class:`APIResponse`.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from .core.codec import serialize
from .core.message import Message
from .core.schemas import APIResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class ClientError(Exception):
    """Raised when a request to the processor cannot be completed or decoded."""


def _decode(response: httpx.Response) -> APIResponse:
    try:
        return APIResponse.model_validate_json(response.content)
    except ValidationError as e:
        raise ClientError(f"error decoding response: {e}") from e


def send_hl7_message(url: str, message: Message, client: Optional[httpx.Client] = None) -> APIResponse:
    """POST ``message`` as HL7 v2 text to ``url`` and return the decoded envelope.

    Error envelopes (``success`` false) are returned, not raised; only transport
    and decoding failures raise :class:`ClientError`.
    """
    payload = serialize(message)
    owns_client = client is None
    client = client or httpx.Client(timeout=DEFAULT_TIMEOUT)
    try:
        response = client.post(
            url,
            content=payload.encode("utf-8"),
            headers={"Content-Type": "application/hl7-v2"},
        )
    except httpx.HTTPError as e:
        logger.error(f"Failed to send HL7 message: {e}")
        raise ClientError(f"error sending request: {e}") from e
    finally:
        if owns_client:
            client.close()

    return _decode(response)


def get_sample_hl7_message(url: str, client: Optional[httpx.Client] = None) -> APIResponse:
    """GET a sample message from ``url`` and return the decoded envelope."""
    owns_client = client is None
    client = client or httpx.Client(timeout=DEFAULT_TIMEOUT)
    try:
        response = client.get(url)
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch sample HL7 message: {e}")
        raise ClientError(f"error getting sample message: {e}") from e
    finally:
        if owns_client:
            client.close()

    return _decode(response)
