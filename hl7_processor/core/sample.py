from __future__ import annotations

from datetime import datetime
from typing import Optional

from .codec import COMPONENT_SEPARATOR, ESCAPE_CHARACTER, REPETITION_SEPARATOR, SUBCOMPONENT_SEPARATOR
from .message import Message

# MSH-2 encoding characters
ENCODING_CHARACTERS = COMPONENT_SEPARATOR + REPETITION_SEPARATOR + ESCAPE_CHARACTER + SUBCOMPONENT_SEPARATOR

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def generate_sample_message(now: Optional[datetime] = None) -> Message:
    """Build the demonstration ADT^A01 message (MSH + PID).

    ``now`` sets the MSH timestamp; defaults to the current local time.
    """
    timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)

    message = Message()
    message.add_segment(
        "MSH",
        ENCODING_CHARACTERS,
        "SENDING_APP",
        "SENDING_FACILITY",
        "RECEIVING_APP",
        "RECEIVING_FACILITY",
        timestamp,
        "",
        "ADT^A01",
        "MSG00001",
        "P",
        "2.5",
    )
    message.add_segment(
        "PID",
        "",
        "12345",
        "",
        "",
        "Doe^John",
        "",
        "19800101",
        "M",
    )
    return message
