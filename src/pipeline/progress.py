"""
Module: progress.py
Description: Sink progress tracking for the hosting pipeline.

A sink reports every event it picks up, before delivery is attempted.
The tracker keeps a running count and the position of the last event so
the pipeline can tell how far each sink has read.
"""

import threading
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.event import Event
from utils.logger import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[Event], None]


class ProgressSnapshot(BaseModel):
    """Point-in-time view of a tracker."""

    model_config = ConfigDict(frozen=True)

    events: int = Field(default=0, ge=0, description="Events picked up so far")
    last_variant: Optional[str] = Field(default=None, description="Variant of the last event")
    last_timestamp: Optional[int] = Field(default=None, description="Source timestamp of the last event")
    last_fingerprint: Optional[str] = Field(default=None, description="Fingerprint of the last event")


class ProgressTracker:
    """
    Thread-safe progress counter.

    Instances are callable so they can be passed directly as the
    ``notify`` callback of a writer loop.
    """

    def __init__(self, sink: str = "sink"):
        self.sink = sink
        self._lock = threading.Lock()
        self._events = 0
        self._last: Optional[Event] = None

    def __call__(self, event: Event) -> None:
        self.track(event)

    def track(self, event: Event) -> None:
        """Record that ``event`` was picked up for delivery."""
        with self._lock:
            self._events += 1
            self._last = event
            count = self._events

        logger.debug(
            "Sink picked up event",
            sink=self.sink,
            variant=event.variant,
            source_timestamp=event.timestamp,
            events=count
        )

    def snapshot(self) -> ProgressSnapshot:
        with self._lock:
            last = self._last
            return ProgressSnapshot(
                events=self._events,
                last_variant=last.variant if last else None,
                last_timestamp=last.timestamp if last else None,
                last_fingerprint=last.fingerprint if last else None,
            )
