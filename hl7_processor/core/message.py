from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List


@dataclass
class Segment:
    """One HL7 record: a type code such as ``PID`` and its positional fields.

    Field values are opaque. Component, repetition and escape characters inside
    a field are kept as-is.
    """

    type: str
    fields: List[str] = field(default_factory=list)


@dataclass
class Message:
    """An HL7 v2 message as an ordered list of segments."""

    segments: List[Segment] = field(default_factory=list)

    def add_segment(self, segment_type: str, *fields: str) -> Segment:
        """Append a segment built from ``segment_type`` and ``fields``.

        No validation is done on the type or the number of fields.
        """
        segment = Segment(type=segment_type, fields=list(fields))
        self.segments.append(segment)
        return segment

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)
