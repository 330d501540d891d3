"""
Module: webhook.py
Description: HTTP webhook transport.

POSTs each event as JSON to a configured endpoint through one
httpx.Client built at bootstrap. The body is the event's own fields plus
a 'variant' tag and a millisecond 'timestamp', with the payload
fields lifted to the top level.
"""

from typing import Any, Dict, Optional

import httpx

from config.settings import Settings
from config.sinks import WebhookSinkConfig
from models.event import Event
from sinks.base import Transport
from utils.logger import get_logger

logger = get_logger(__name__)


def build_request_body(event: Event) -> Dict[str, Any]:
    """
    Flatten an event into a webhook request body.

    Args:
        event: Event to send

    Returns:
        Context and fingerprint merged with the payload fields, a
        'variant' tag and, when the event has a source timestamp,
        'timestamp' in milliseconds
    """
    body = event.model_dump(mode="json", exclude={"data"})
    (payload,) = event.data.model_dump(mode="json").values()
    body.update(payload)
    body["variant"] = event.variant
    if event.timestamp is not None:
        body["timestamp"] = event.timestamp * 1000
    return body


def build_headers(config: WebhookSinkConfig) -> Dict[str, str]:
    """
    Default headers applied to every request.

    Raises:
        ValueError: If a header name or value is not valid in HTTP
    """
    headers = {"Content-Type": "application/json"}

    if config.authorization is not None:
        headers["Authorization"] = config.authorization

    for name, value in (config.headers or {}).items():
        headers[name] = value

    for name, value in headers.items():
        if not name or not _is_token(name):
            raise ValueError(f"invalid header name: {name!r}")
        if any(ch in value for ch in "\r\n\0"):
            raise ValueError(f"invalid value for header {name!r}")

    return headers


def _is_token(name: str) -> bool:
    allowed = set("!#$%&'*+-.^_`|~")
    return all(ch.isascii() and (ch.isalnum() or ch in allowed) for ch in name)


def build_client(
    config: WebhookSinkConfig,
    settings: Settings,
    transport: Optional[httpx.BaseTransport] = None
) -> httpx.Client:
    """
    Build the HTTP client used for every attempt of one sink.

    Args:
        config: Webhook sink configuration
        settings: Runtime settings (User-Agent, default timeout)
        transport: Optional httpx transport, used to fake the network

    Raises:
        ValueError: If headers are malformed
    """
    headers = build_headers(config)
    headers.setdefault("User-Agent", settings.user_agent)

    timeout_ms = config.timeout or settings.default_webhook_timeout_ms

    return httpx.Client(
        headers=headers,
        timeout=httpx.Timeout(timeout_ms / 1000),
        transport=transport
    )


class WebhookTransport(Transport):
    """
    Delivers events to an HTTP endpoint.

    Both transport errors and non-2xx responses fail the attempt.
    """

    def __init__(self, url: str, client: httpx.Client):
        """
        Initialize the transport.

        Args:
            url: Endpoint receiving one POST per event
            client: Pre-configured HTTP client

        Raises:
            ValueError: If url is not an HTTP(S) URL
        """
        if not url or not isinstance(url, str):
            raise ValueError("url must be a non-empty string")
        if not url.startswith(('http://', 'https://')):
            raise ValueError("url must be a valid HTTP/HTTPS URL")

        self.url = url
        self.client = client

        logger.info(
            "Webhook transport initialized",
            url=url,
            timeout_seconds=client.timeout.read
        )

    @classmethod
    def from_config(
        cls,
        config: WebhookSinkConfig,
        settings: Settings,
        transport: Optional[httpx.BaseTransport] = None
    ) -> "WebhookTransport":
        client = build_client(config, settings, transport=transport)
        try:
            return cls(config.url, client)
        except ValueError:
            client.close()
            raise

    @property
    def name(self) -> str:
        return "webhook"

    def attempt(self, event: Event) -> None:
        """
        POST one event.

        Raises:
            httpx.HTTPError: On network failure or non-2xx response
        """
        body = build_request_body(event)

        response = self.client.post(self.url, json=body)
        response.raise_for_status()

        logger.debug(
            "Event delivered to webhook",
            variant=event.variant,
            status_code=response.status_code
        )

    def close(self) -> None:
        self.client.close()
