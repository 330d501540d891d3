"""
Module: base.py
Description: Transport contract shared by every sink.

A transport turns one event into one delivery attempt. Returning
normally means the event was delivered; raising means the attempt
failed and may be retried. The writer loop and retry executor only
depend on this contract.
"""

from abc import ABC, abstractmethod

from models.event import Event


class Transport(ABC):
    """Abstract base class for sink transports."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name used in logs and thread names."""
        ...

    @abstractmethod
    def attempt(self, event: Event) -> None:
        """
        Attempt to deliver a single event once.

        Args:
            event: Event to deliver

        Raises:
            Exception: Any failure, all of them retryable
        """
        ...

    def close(self) -> None:
        """Release clients held by this transport."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
