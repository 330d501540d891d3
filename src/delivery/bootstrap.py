"""
Module: delivery/bootstrap.py
Description: Sink startup.

Builds a transport from its configuration, resolves the delivery
policies, and runs the writer loop on a dedicated thread. Construction
errors surface synchronously, before any worker starts; delivery errors
surface through the returned handle.

Key Components:
- build_transport(): Transport for a sink config
- SinkHandle: Join-able handle on a running worker
- bootstrap_sink(): Build and start one sink

Dependencies: threading, config, sinks, pipeline
Author: Event Relay Team
"""

import threading
import time
from enum import Enum
from typing import Callable, Iterable, Optional, Union

from config.settings import Settings
from config.settings import settings as default_settings
from config.sinks import PubSubSinkConfig, WebhookSinkConfig, resolve_policies
from delivery.errors import SinkConfigError
from delivery.worker import writer_loop
from models.event import Event
from pipeline.progress import ProgressTracker
from sinks.base import Transport
from sinks.pubsub import PubSubTransport
from sinks.webhook import WebhookTransport
from utils.logger import get_logger

logger = get_logger(__name__)

AnySinkConfig = Union[PubSubSinkConfig, WebhookSinkConfig]


class WorkerState(str, Enum):
    """Lifecycle of a sink worker."""

    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class SinkHandle:
    """
    Handle on one running sink worker.

    The worker thread stores its fatal error instead of letting it
    escape, and join() re-raises it in the caller.
    """

    def __init__(self, name: str, input: Iterable[Event], target: Callable[[], None]):
        self.name = name
        self._input = input
        self._target = target
        self._error: Optional[BaseException] = None
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def _run(self) -> None:
        try:
            self._target()
        except BaseException as e:
            self._error = e
            logger.error("Sink worker stopped on error", sink=self.name, error=repr(e))
        else:
            logger.info("Sink worker stopped", sink=self.name)

    @property
    def done(self) -> bool:
        return self._thread.ident is not None and not self._thread.is_alive()

    @property
    def error(self) -> Optional[BaseException]:
        """Fatal error of a stopped worker, None otherwise."""
        return self._error

    @property
    def state(self) -> WorkerState:
        if self.done:
            return WorkerState.STOPPED
        if getattr(self._input, "closed", False):
            return WorkerState.DRAINING
        return WorkerState.RUNNING

    def join(self, timeout: Optional[float] = None) -> None:
        """
        Wait for the worker to stop.

        Raises:
            TimeoutError: If the worker is still running after timeout
            Exception: The fatal error that stopped the worker
        """
        self._thread.join(timeout)
        if self._thread.is_alive():
            raise TimeoutError(f"sink {self.name} still running after {timeout}s")
        if self._error is not None:
            raise self._error

    def __repr__(self) -> str:
        return f"SinkHandle(name={self.name!r}, state={self.state.value!r})"


def build_transport(config: AnySinkConfig, settings: Settings) -> Transport:
    """
    Build the transport for a sink config.

    Raises:
        SinkConfigError: If the config is unknown or the client cannot be built
    """
    sink_type = getattr(config, "type", type(config).__name__)
    try:
        if isinstance(config, PubSubSinkConfig):
            return PubSubTransport.from_config(config)
        if isinstance(config, WebhookSinkConfig):
            return WebhookTransport.from_config(config, settings)
    except Exception as e:
        raise SinkConfigError(sink_type, str(e)) from e

    raise SinkConfigError(sink_type, "unsupported sink configuration")


def bootstrap_sink(
    config: AnySinkConfig,
    input: Iterable[Event],
    *,
    notify: Optional[Callable[[Event], None]] = None,
    settings: Optional[Settings] = None,
    sleep: Callable[[float], None] = time.sleep
) -> SinkHandle:
    """
    Build a sink and start its worker.

    Args:
        config: Sink configuration
        input: Event channel the worker consumes
        notify: Progress callback, a fresh ProgressTracker when omitted
        settings: Runtime settings, process settings when omitted
        sleep: Sleep function used between retries

    Returns:
        Handle on the started worker

    Raises:
        SinkConfigError: If the transport cannot be built
    """
    settings = settings or default_settings
    transport = build_transport(config, settings)
    error_policy, retry_policy = resolve_policies(config, settings)
    notify = notify or ProgressTracker(transport.name)

    def run() -> None:
        try:
            writer_loop(
                input,
                transport,
                error_policy=error_policy,
                retry_policy=retry_policy,
                notify=notify,
                sleep=sleep
            )
        finally:
            transport.close()

    handle = SinkHandle(f"sink-{transport.name}", input, run)
    handle.start()

    logger.info(
        "Sink started",
        sink=transport.name,
        error_policy=error_policy.value,
        max_retries=retry_policy.max_retries,
        backoff_unit_seconds=retry_policy.backoff_unit.total_seconds(),
        max_backoff_seconds=retry_policy.max_backoff.total_seconds()
    )

    return handle
