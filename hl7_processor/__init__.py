"""
HL7 v2 message processor.

Parses pipe-delimited HL7 v2 messages into an ordered segment/field model,
serializes them back to wire text and exposes both over a small HTTP API.
"""

__version__ = "1.0.0"
