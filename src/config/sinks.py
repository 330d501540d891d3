"""
Module: sinks.py
Description: Typed configuration for delivery sinks.

Defines the per-sink configuration objects handed to the bootstrap, the
error policy applied after a delivery is exhausted, and the retry policy
with its exponential backoff schedule.

Key Components:
- ErrorPolicy: Exit or Continue once an event exhausts its retries
- RetryPolicy: Bounded exponential backoff (no jitter)
- PubSubSinkConfig / WebhookSinkConfig: Transport specific fields
- SinkConfig: Discriminated union of all sink configs
- resolve_policies(): Apply runtime defaults to a sink config

Dependencies: pydantic, datetime, enum, typing
Author: Event Relay Team
"""

from datetime import timedelta
from enum import Enum
from typing import Annotated, Any, Dict, Iterator, Literal, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

from config.settings import Settings


class ErrorPolicy(str, Enum):
    """What a worker does once an event has exhausted its retries."""

    EXIT = "exit"
    CONTINUE = "continue"

    @classmethod
    def _missing_(cls, value: object) -> Optional["ErrorPolicy"]:
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None


class RetryPolicy(BaseModel):
    """
    Bounded exponential backoff.

    The initial attempt runs without delay. Retry number ``k`` (0-based)
    waits ``min(backoff_unit * backoff_factor**k, max_backoff)`` first.
    At most ``max_retries`` retries follow the initial attempt.

    Durations accept ``timedelta`` values or integer milliseconds.

    Attributes:
        max_retries: Retries allowed after the first attempt
        backoff_unit: Delay before the first retry
        backoff_factor: Growth factor between consecutive retries
        max_backoff: Cap for any single delay
    """

    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(
        ...,
        ge=0,
        description="Retries allowed after the first attempt"
    )
    backoff_unit: timedelta = Field(
        ...,
        description="Delay before the first retry"
    )
    backoff_factor: int = Field(
        default=2,
        ge=1,
        description="Growth factor between consecutive retries"
    )
    max_backoff: timedelta = Field(
        ...,
        description="Upper bound for a single delay"
    )

    @field_validator('backoff_unit', 'max_backoff', mode='before')
    @classmethod
    def parse_milliseconds(cls, v: Any) -> Any:
        """Plain integers are milliseconds."""
        if isinstance(v, int) and not isinstance(v, bool):
            return timedelta(milliseconds=v)
        return v

    @field_validator('backoff_unit', 'max_backoff')
    @classmethod
    def validate_non_negative(cls, v: timedelta) -> timedelta:
        if v < timedelta(0):
            raise ValueError("backoff durations must not be negative")
        return v

    @model_validator(mode='after')
    def validate_bounds(self) -> "RetryPolicy":
        """backoff_unit may not exceed max_backoff."""
        if self.backoff_unit > self.max_backoff:
            raise ValueError("backoff_unit must not exceed max_backoff")
        return self

    @property
    def max_attempts(self) -> int:
        """Initial attempt plus every allowed retry."""
        return self.max_retries + 1

    def delay(self, retry_index: int) -> timedelta:
        """
        Delay before retry ``retry_index`` (0-based).

        Saturates at ``max_backoff`` without computing the full power,
        so very large indexes stay cheap.

        Args:
            retry_index: Number of retries already performed

        Returns:
            Delay to sleep before the next attempt

        Raises:
            ValueError: If retry_index is negative
        """
        if retry_index < 0:
            raise ValueError("retry_index must be >= 0")

        if self.backoff_factor == 1 or not self.backoff_unit:
            return min(self.backoff_unit, self.max_backoff)

        delay = self.backoff_unit
        for _ in range(retry_index):
            # the next step would pass the cap; skip the product
            if delay > self.max_backoff / self.backoff_factor:
                return self.max_backoff
            delay *= self.backoff_factor
        return min(delay, self.max_backoff)

    def delays(self) -> Iterator[timedelta]:
        """Every delay one fully exhausted operation goes through."""
        for retry_index in range(self.max_retries):
            yield self.delay(retry_index)


class _BaseSinkConfig(BaseModel):
    """Fields shared by every sink."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_policy: Optional[ErrorPolicy] = Field(
        default=None,
        description="Exit (default) or Continue after an exhausted delivery"
    )
    retry_policy: Optional[RetryPolicy] = Field(
        default=None,
        description="Backoff schedule, runtime defaults when omitted"
    )


class PubSubSinkConfig(_BaseSinkConfig):
    """
    Google Cloud Pub/Sub sink.

    Attributes:
        topic: Topic name, or a full 'projects/<p>/topics/<t>' path
        credentials: Path to a service account key file
        publish_timeout: Seconds a single publish call may take
    """

    type: Literal["gcp_pubsub"] = "gcp_pubsub"
    topic: str = Field(..., min_length=1, description="Topic name or path")
    credentials: str = Field(..., min_length=1, description="Service account key file")
    publish_timeout: int = Field(default=10, ge=1, description="Publish timeout in seconds")


class WebhookSinkConfig(_BaseSinkConfig):
    """
    HTTP webhook sink.

    Attributes:
        url: Endpoint receiving one POST per event
        authorization: Value of the Authorization header, if any
        headers: Extra static headers sent with every request
        timeout: Request timeout in milliseconds
    """

    type: Literal["webhook"] = "webhook"
    url: str = Field(..., min_length=1, description="Webhook endpoint URL")
    authorization: Optional[str] = Field(default=None, description="Authorization header value")
    headers: Optional[Dict[str, str]] = Field(default=None, description="Extra request headers")
    timeout: Optional[int] = Field(default=None, ge=1, description="Timeout in milliseconds")


SinkConfig = Annotated[
    Union[PubSubSinkConfig, WebhookSinkConfig],
    Field(discriminator="type"),
]

_sink_config_adapter = TypeAdapter(SinkConfig)


def parse_sink_config(data: Dict[str, Any]) -> Union[PubSubSinkConfig, WebhookSinkConfig]:
    """
    Validate an already loaded mapping into the matching sink config.

    Args:
        data: Mapping with a 'type' key selecting the sink

    Raises:
        pydantic.ValidationError: If the mapping does not describe a sink
    """
    return _sink_config_adapter.validate_python(data)


def default_retry_policy(settings: Settings) -> RetryPolicy:
    """Retry policy used by sinks that do not configure one."""
    return RetryPolicy(
        max_retries=settings.default_max_retries,
        backoff_unit=timedelta(milliseconds=settings.default_backoff_unit_ms),
        backoff_factor=settings.default_backoff_factor,
        max_backoff=timedelta(milliseconds=settings.default_max_backoff_ms),
    )


def resolve_policies(
    config: Union[PubSubSinkConfig, WebhookSinkConfig],
    settings: Settings
) -> Tuple[ErrorPolicy, RetryPolicy]:
    """
    Resolve the error and retry policy a worker runs with.

    Both values are immutable, so each worker holds its own copy.

    Args:
        config: Sink configuration
        settings: Runtime settings providing the defaults

    Returns:
        Tuple of (error_policy, retry_policy)
    """
    error_policy = config.error_policy or ErrorPolicy.EXIT
    retry_policy = config.retry_policy or default_retry_policy(settings)
    return error_policy, retry_policy
