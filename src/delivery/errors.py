"""
Module: errors.py
Description: Exception hierarchy for event delivery.

Construction problems are fatal and raised once at bootstrap. Anything
raised while attempting a delivery is retryable, whatever its type.
"""


class SinkError(Exception):
    """Base class for sink errors."""


class SinkConfigError(SinkError):
    """A sink could not be built from its configuration. Never retried."""

    def __init__(self, sink: str, message: str):
        self.sink = sink
        super().__init__(f"{sink}: {message}")


class DeliveryError(SinkError):
    """A single delivery attempt failed."""

    def __init__(self, sink: str, message: str):
        self.sink = sink
        super().__init__(f"{sink}: {message}")


class ChannelClosedError(SinkError):
    """An event was written to a channel that has been closed."""
