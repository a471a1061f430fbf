"""
Core HL7 v2 codec: message model, parser and serializer.
"""

from .codec import parse, parse_bytes, parse_stream, serialize
from .exceptions import ErrorCode, FormatError, HL7Error, ScanError
from .message import Message, Segment

__all__ = [
    "ErrorCode",
    "FormatError",
    "HL7Error",
    "Message",
    "ScanError",
    "Segment",
    "parse",
    "parse_bytes",
    "parse_stream",
    "serialize",
]
