from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

from .message import Message, Segment


class SegmentSchema(BaseModel):
    type: str = Field(
        ...,
        validation_alias=AliasChoices("type", "Type"),
        description="Segment type code",
        examples=["MSH", "PID", "OBX"]
    )
    fields: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("fields", "Fields"),
        description="Positional field values; component/repetition delimiters are kept verbatim",
        examples=[["", "12345", "", "", "Doe^John"]]
    )


class MessageSchema(BaseModel):
    """JSON form of an HL7 message.

    Output keys are lower-case. Input also accepts the capitalised
    ``Segments`` / ``Type`` / ``Fields`` keys of the legacy processor.
    """

    segments: List[SegmentSchema] = Field(
        default_factory=list,
        validation_alias=AliasChoices("segments", "Segments"),
    )

    @classmethod
    def from_message(cls, message: Message) -> "MessageSchema":
        return cls(
            segments=[SegmentSchema(type=s.type, fields=list(s.fields)) for s in message.segments]
        )

    def to_message(self) -> Message:
        return Message(
            segments=[Segment(type=s.type, fields=list(s.fields)) for s in self.segments]
        )


class APIResponse(BaseModel):
    """Response envelope shared by all JSON endpoints."""

    success: bool
    message: str
    data: Optional[MessageSchema] = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "success": True,
                    "message": "HL7 message parsed successfully",
                    "data": {
                        "segments": [
                            {"type": "MSH", "fields": ["^~\\&", "SENDING_APP"]},
                            {"type": "PID", "fields": ["", "12345", "", "", "Doe^John"]}
                        ]
                    }
                }
            ]
        }
    }


class VersionInfo(BaseModel):
    version: str
    buildDate: str
