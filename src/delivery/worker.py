"""
Module: delivery/worker.py
Description: Writer loop delivering events from a channel to a transport.

Takes events one at a time in arrival order, reports each one to the
pipeline, and runs the transport under the retry policy. What happens
after an exhausted delivery is decided by the error policy: Exit stops
the worker with the last error, Continue logs it and moves on.
"""

import time
from functools import partial
from typing import Callable, Iterable

from config.sinks import ErrorPolicy, RetryPolicy
from delivery.retry import retry_operation
from models.event import Event
from sinks.base import Transport
from utils.logger import get_logger

logger = get_logger(__name__)


def writer_loop(
    input: Iterable[Event],
    transport: Transport,
    *,
    error_policy: ErrorPolicy,
    retry_policy: RetryPolicy,
    notify: Callable[[Event], None],
    sleep: Callable[[float], None] = time.sleep
) -> None:
    """
    Deliver every event from ``input`` until it is exhausted.

    ``notify`` is called once per event before its delivery starts, so
    it reflects events picked up, not events delivered.

    Args:
        input: Event source, iteration ends when the channel closes
        transport: Transport attempting each delivery
        error_policy: Fate of the worker after an exhausted delivery
        retry_policy: Retry and backoff bounds for each event
        notify: Progress callback
        sleep: Sleep function used between retries

    Raises:
        Exception: The last delivery error, under ErrorPolicy.EXIT
    """
    delivered = 0
    dropped = 0

    for event in input:
        notify(event)

        try:
            retry_operation(
                partial(transport.attempt, event),
                retry_policy,
                sleep=sleep,
                description=transport.name
            )
        except Exception as e:
            if error_policy is ErrorPolicy.EXIT:
                logger.warning(
                    "Delivery retries exhausted, stopping sink",
                    sink=transport.name,
                    variant=event.variant,
                    attempts=retry_policy.max_attempts,
                    error=repr(e)
                )
                raise

            dropped += 1
            logger.warning(
                "failed to deliver event",
                sink=transport.name,
                variant=event.variant,
                attempts=retry_policy.max_attempts,
                error=repr(e)
            )
            continue

        delivered += 1

    logger.info(
        "Input closed, writer loop finished",
        sink=transport.name,
        delivered=delivered,
        dropped=dropped
    )
