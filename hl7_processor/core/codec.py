"""
HL7 v2 wire codec.

Converts between pipe-delimited HL7 v2 text and :class:`Message`. Only the
segment and field separators are interpreted; component, sub-component,
repetition and escape characters travel inside field text untouched.
"""

from __future__ import annotations

import logging
from typing import IO, Iterator, Union

from .exceptions import FormatError, ScanError
from .message import Message, Segment

logger = logging.getLogger(__name__)

SEGMENT_SEPARATOR = "\r"
FIELD_SEPARATOR = "|"
COMPONENT_SEPARATOR = "^"
SUBCOMPONENT_SEPARATOR = "&"
REPETITION_SEPARATOR = "~"
ESCAPE_CHARACTER = "\\"

DEFAULT_ENCODING = "utf-8"


def _iter_segment_chunks(raw: str) -> Iterator[str]:
    """Yield the text between segment separators, in order.

    Data left after the last separator is yielded as a final chunk; a separator
    at the very end of the input yields nothing further.
    """
    start = 0
    end_of_input = len(raw)
    while start < end_of_input:
        index = raw.find(SEGMENT_SEPARATOR, start)
        if index < 0:
            yield raw[start:]
            return
        yield raw[start:index]
        start = index + 1


def parse(raw: str) -> Message:
    """Parse HL7 v2 text into a :class:`Message`.

    Empty chunks (consecutive separators) are skipped. Segment types are not
    validated and segments keep their input order.

    Raises
    ------
    FormatError
        If a chunk does not yield at least a segment type.
    """
    message = Message()

    for index, chunk in enumerate(_iter_segment_chunks(raw)):
        if not chunk:
            continue

        tokens = chunk.split(FIELD_SEPARATOR)
        if len(tokens) < 1:
            raise FormatError("invalid segment format", segment_index=index)

        message.segments.append(Segment(type=tokens[0], fields=tokens[1:]))

    logger.debug("Parsed HL7 message", extra={"extra": {"segment_count": len(message.segments)}})
    return message


def parse_bytes(data: bytes, encoding: str = DEFAULT_ENCODING) -> Message:
    """Decode ``data`` and parse it.

    Raises
    ------
    ScanError
        If the bytes cannot be decoded.
    """
    try:
        raw = data.decode(encoding)
    except UnicodeDecodeError as e:
        raise ScanError(f"error decoding HL7 input: {e}") from e
    return parse(raw)


def parse_stream(stream: IO, encoding: str = DEFAULT_ENCODING) -> Message:
    """Read a text or binary stream to the end and parse its contents.

    Raises
    ------
    ScanError
        If reading or decoding the stream fails.
    """
    try:
        data: Union[str, bytes] = stream.read()
    # ValueError covers UnicodeDecodeError and reads from closed streams
    except (OSError, ValueError) as e:
        raise ScanError(f"error reading HL7 input: {e}") from e

    if isinstance(data, bytes):
        return parse_bytes(data, encoding=encoding)
    return parse(data)


def serialize(message: Message) -> str:
    """Render ``message`` as HL7 v2 wire text.

    Every segment, including the last, is terminated by the segment separator.
    Field text is written verbatim with no escaping.
    """
    parts = []
    for segment in message.segments:
        parts.append(segment.type)
        for value in segment.fields:
            parts.append(FIELD_SEPARATOR)
            parts.append(value)
        parts.append(SEGMENT_SEPARATOR)
    return "".join(parts)
