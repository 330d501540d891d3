"""
Module: event.py
Description: Event data models for the Event Relay sinks.

Defines the Event record handed over by upstream pipeline stages. Sinks
treat events as opaque: they only read the payload variant tag and the
optional source timestamp, and serialize the rest as-is.

Key Components:
- EventContext: Where the event came from (timestamp plus free-form fields)
- EventData: Variant tag and payload, serialized externally tagged
- Event: Immutable record with JSON encoding helpers

Dependencies: pydantic, re, typing
Author: Event Relay Team
"""

import re
from typing import Any, Dict, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_serializer,
    model_validator,
)


def _snake_case(name: str) -> str:
    """Convert a CamelCase variant name into its snake_case wire key."""
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def _camel_case(key: str) -> str:
    return ''.join(part.capitalize() for part in key.split('_'))


class EventContext(BaseModel):
    """
    Source context of an event.

    Only the timestamp is interpreted by the sinks. Any other contextual
    fields supplied upstream (block number, slot, tx hash, ...) are kept
    and serialized unchanged.

    Attributes:
        timestamp: Source timestamp in seconds since the epoch, if known
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    timestamp: Optional[int] = Field(
        default=None,
        ge=0,
        description="Source timestamp in seconds"
    )


class EventData(BaseModel):
    """
    Payload of an event, tagged by its variant.

    On the wire the payload is externally tagged by the snake_case
    variant name, e.g. ``{"transaction": {...}}``. Both that form and the
    explicit ``{"variant": ..., "payload": ...}`` form are accepted.

    Attributes:
        variant: Variant tag (e.g. 'Block', 'Transaction')
        payload: Variant specific fields
    """

    model_config = ConfigDict(frozen=True)

    variant: str = Field(
        ...,
        min_length=1,
        description="Payload variant tag"
    )
    payload: Dict[str, Any] = Field(
        default_factory=dict,
        description="Variant specific payload"
    )

    @model_validator(mode='before')
    @classmethod
    def parse_tagged(cls, v: Any) -> Any:
        """Accept the externally tagged wire form."""
        if isinstance(v, dict) and 'variant' not in v and len(v) == 1:
            (key, payload), = v.items()
            if payload is None:
                payload = {}
            return {'variant': _camel_case(key), 'payload': payload}
        return v

    @field_validator('variant')
    @classmethod
    def validate_variant(cls, v: str) -> str:
        """Variant tags are CamelCase identifiers."""
        if not re.match(r'^[A-Z][A-Za-z0-9]*$', v):
            raise ValueError("variant must be a CamelCase identifier")
        return v

    @model_serializer
    def serialize_tagged(self) -> Dict[str, Any]:
        return {_snake_case(self.variant): self.payload}

    def __str__(self) -> str:
        return self.variant


class Event(BaseModel):
    """
    Event record flowing through the pipeline.

    Immutable once constructed; a sink never modifies the events it
    delivers.

    Attributes:
        context: Source context (timestamp and free-form fields)
        data: Variant tagged payload
        fingerprint: Optional upstream deduplication fingerprint
    """

    model_config = ConfigDict(frozen=True)

    context: EventContext = Field(
        default_factory=EventContext,
        description="Source context"
    )
    data: EventData = Field(
        ...,
        description="Variant tagged payload"
    )
    fingerprint: Optional[str] = Field(
        default=None,
        description="Upstream deduplication fingerprint"
    )

    @property
    def variant(self) -> str:
        """Variant tag of the payload."""
        return self.data.variant

    @property
    def timestamp(self) -> Optional[int]:
        """Source timestamp in seconds, or None."""
        return self.context.timestamp

    def to_json(self) -> str:
        """Canonical textual encoding used by message based sinks."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, raw: str) -> "Event":
        """Parse an event from its canonical textual encoding."""
        return cls.model_validate_json(raw)
