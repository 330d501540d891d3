"""
Module: conftest.py
Description: Shared pytest fixtures for Event Relay sink tests.

Provides sample events, test settings that ignore the environment,
fast retry policies, and fake transports so the writer loop can be
exercised without network access or real sleeps.
"""

from datetime import timedelta
from typing import List

import pytest

from config.settings import Settings
from config.sinks import RetryPolicy
from models.event import Event, EventContext, EventData
from sinks.base import Transport


class RecordingSleep:
    """Sleep replacement remembering every requested delay."""

    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.calls)


class FakeTransport(Transport):
    """
    Transport failing a scripted number of attempts per event.

    Records every attempt as (variant, sequence number) and a shared
    journal of operations so tests can check ordering.
    """

    def __init__(self, failures_per_event: int = 0, journal: list = None):
        self.failures_per_event = failures_per_event
        self.journal = journal if journal is not None else []
        self.attempts: List[str] = []
        self.delivered: List[Event] = []
        self.closed = False
        self._failures = {}

    @property
    def name(self) -> str:
        return "fake"

    def attempt(self, event: Event) -> None:
        key = event.fingerprint
        self.attempts.append(key)
        self.journal.append(("attempt", key))
        done = self._failures.get(key, 0)
        if done < self.failures_per_event:
            self._failures[key] = done + 1
            raise ConnectionError(f"attempt {done + 1} failed for {key}")
        self.delivered.append(event)

    def close(self) -> None:
        self.closed = True


class TestSettings(Settings):
    """Settings that don't read environment variables or .env files."""

    __test__ = False

    @classmethod
    def settings_customise_sources(cls, settings_cls, init_settings, *args, **kwargs):
        return (init_settings,)


def make_event(variant: str = "Transaction", timestamp=1700000000, fingerprint=None, **payload) -> Event:
    return Event(
        context=EventContext(timestamp=timestamp, slot=42),
        data=EventData(variant=variant, payload=payload or {"hash": "abc123", "fee": 170000}),
        fingerprint=fingerprint,
    )


@pytest.fixture
def test_settings():
    """Runtime settings with the built-in defaults."""
    return TestSettings()


@pytest.fixture
def sample_event():
    """A transaction event with a source timestamp."""
    return make_event(fingerprint="evt-1")


@pytest.fixture
def event_without_timestamp():
    """A block event without a source timestamp."""
    return make_event(variant="Block", timestamp=None, fingerprint="evt-2", number=9)


@pytest.fixture
def events():
    """Five distinct events, in submission order."""
    return [make_event(fingerprint=f"evt-{i}", index=i) for i in range(5)]


@pytest.fixture
def fast_policy():
    """Retry policy with three retries: 1s, 2s, 4s."""
    return RetryPolicy(
        max_retries=3,
        backoff_unit=timedelta(seconds=1),
        backoff_factor=2,
        max_backoff=timedelta(seconds=60),
    )


@pytest.fixture
def sleep():
    return RecordingSleep()
