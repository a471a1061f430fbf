"""
Prometheus metrics for HL7 message handling.

Tracks parse outcomes, segment volume by type, parse latency and generated
sample messages.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Generator, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from .message import Message

# Segment types reported under their own label; anything else is bucketed
KNOWN_SEGMENT_TYPES = frozenset([
    "MSH", "MSA", "ERR", "EVN", "PID", "PD1", "NK1", "PV1", "PV2", "AL1", "DG1",
    "IN1", "GT1", "ORC", "OBR", "OBX", "NTE", "SPM", "TXA", "SCH", "RXA", "RXE",
    "RXO", "RXR",
])
CUSTOM_SEGMENT_LABEL = "Z"
OTHER_SEGMENT_LABEL = "other"


def segment_type_label(segment_type: str) -> str:
    """Map a segment type to a label from a fixed set."""
    if segment_type in KNOWN_SEGMENT_TYPES:
        return segment_type
    if segment_type.startswith("Z"):
        return CUSTOM_SEGMENT_LABEL
    return OTHER_SEGMENT_LABEL


class HL7Metrics:
    """Metrics collector bound to its own registry."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.messages_parsed = Counter(
            "hl7_messages_parsed_total",
            "HL7 messages submitted for parsing",
            labelnames=["status"],
            registry=self.registry
        )

        self.segments_parsed = Counter(
            "hl7_segments_parsed_total",
            "Segments extracted from parsed HL7 messages",
            labelnames=["segment_type"],
            registry=self.registry
        )

        self.parse_duration = Histogram(
            "hl7_parse_duration_seconds",
            "Time spent parsing HL7 messages",
            buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
            registry=self.registry
        )

        self.messages_generated = Counter(
            "hl7_messages_generated_total",
            "Sample HL7 messages generated",
            labelnames=["format"],
            registry=self.registry
        )

    @contextmanager
    def time_parse(self) -> Generator[None, None, None]:
        """Time a parse and count its outcome; exceptions are re-raised."""
        start = time.perf_counter()
        try:
            yield
        except Exception:
            self.messages_parsed.labels(status="error").inc()
            raise
        finally:
            self.parse_duration.observe(time.perf_counter() - start)
        self.messages_parsed.labels(status="ok").inc()

    def record_segments(self, message: Message) -> None:
        for segment in message.segments:
            self.segments_parsed.labels(segment_type=segment_type_label(segment.type)).inc()

    def record_generated(self, output_format: str) -> None:
        self.messages_generated.labels(format=output_format).inc()

    def export(self) -> bytes:
        return generate_latest(self.registry)
