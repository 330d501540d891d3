"""
Module: delivery/retry.py
Description: Retry logic for event delivery.

Runs a fallible operation under a RetryPolicy: exponential backoff
without jitter, a fixed number of retries, and the last error re-raised
once every attempt has failed.
"""

import time
from typing import Callable, Optional, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from config.sinks import RetryPolicy
from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class wait_backoff(wait_base):
    """Wait strategy applying RetryPolicy.delay() to each retry."""

    def __init__(self, policy: RetryPolicy) -> None:
        self.policy = policy

    def __call__(self, retry_state: RetryCallState) -> float:
        retry_index = retry_state.attempt_number - 1
        return self.policy.delay(retry_index).total_seconds()


def _log_retry(description: Optional[str]) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.info(
            "Delivery attempt failed, retrying",
            operation=description,
            attempt=retry_state.attempt_number,
            delay_seconds=retry_state.upcoming_sleep,
            error=repr(error)
        )

    return before_sleep


def retry_operation(
    operation: Callable[[], T],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], None] = time.sleep,
    description: Optional[str] = None
) -> T:
    """
    Run an operation until it succeeds or the policy is exhausted.

    Any exception counts as a failed attempt. Attempts and sleeps run
    sequentially on the calling thread, and once started a sequence is
    not interruptible.

    Args:
        operation: Zero-argument callable performing one attempt
        policy: Retry policy bounding attempts and delays
        sleep: Sleep function, receives seconds
        description: Label used in retry log records

    Returns:
        Value returned by the first successful attempt

    Raises:
        Exception: The error of the last attempt when all attempts fail
    """
    retrying = Retrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_backoff(policy),
        retry=retry_if_exception_type(Exception),
        sleep=sleep,
        before_sleep=_log_retry(description),
        reraise=True
    )
    return retrying(operation)
