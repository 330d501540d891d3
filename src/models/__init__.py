"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains the data models flowing through the sinks:
- Event: Immutable pipeline event
- EventContext: Source context of an event
- EventData: Variant tagged event payload

All models are exported here for convenient importing.
"""

from .event import Event, EventContext, EventData

__all__ = [
    "Event",
    "EventContext",
    "EventData",
]
