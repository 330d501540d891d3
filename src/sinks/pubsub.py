"""
Module: pubsub.py
Description: Google Cloud Pub/Sub transport.

Publishes each event's canonical JSON encoding as one message. The
Pub/Sub client is asyncio based; the transport owns a private event loop
and drives every publish to completion before returning, so the worker
stays strictly sequential and one event's publish never overlaps the
next.

Key Components:
- load_service_account(): Read and check a service account key file
- resolve_topic_path(): Qualify a topic name with its project
- PubSubTransport: Transport bound to one topic and one event loop

Dependencies: gcloud-aio-pubsub, aiohttp, asyncio, json
Author: Event Relay Team
"""

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp
from gcloud.aio.pubsub import PublisherClient, PubsubMessage

from config.sinks import PubSubSinkConfig
from delivery.errors import DeliveryError
from models.event import Event
from sinks.base import Transport
from utils.logger import get_logger

logger = get_logger(__name__)


def load_service_account(path: str) -> Dict[str, Any]:
    """
    Read a service account key file.

    Args:
        path: Path to the JSON key file

    Returns:
        Parsed key file contents

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file is not a JSON object
    """
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)

    if not isinstance(data, dict):
        raise ValueError(f"credentials file {path} does not hold a JSON object")

    return data


def resolve_topic_path(topic: str, service_account: Dict[str, Any]) -> str:
    """
    Qualify a topic name into 'projects/<project>/topics/<topic>'.

    Full topic paths are validated and returned unchanged; short names
    take the project from the service account.

    Raises:
        ValueError: If the topic is malformed or no project is known
    """
    if topic.startswith("projects/"):
        parts = topic.split("/")
        if len(parts) != 4 or parts[2] != "topics" or not parts[1] or not parts[3]:
            raise ValueError(f"malformed topic path: {topic}")
        return topic

    if "/" in topic:
        raise ValueError(f"malformed topic name: {topic}")

    project = service_account.get("project_id")
    if not project:
        raise ValueError("credentials do not name a project_id, use a full topic path")

    return f"projects/{project}/topics/{topic}"


class PubSubTransport(Transport):
    """
    Delivers events to a Pub/Sub topic.

    Attributes:
        topic_path: Fully qualified topic
        publisher: Asyncio Pub/Sub publisher client
        loop: Event loop private to this transport
        timeout: Seconds a single publish call may take
    """

    def __init__(
        self,
        topic_path: str,
        publisher: PublisherClient,
        loop: asyncio.AbstractEventLoop,
        timeout: int = 10,
        session: Optional[aiohttp.ClientSession] = None
    ):
        if not topic_path or not isinstance(topic_path, str):
            raise ValueError("topic_path must be a non-empty string")

        self.topic_path = topic_path
        self.publisher = publisher
        self.loop = loop
        self.timeout = timeout
        self._session = session

        logger.info(
            "Pub/Sub transport initialized",
            topic=topic_path,
            timeout_seconds=timeout
        )

    @classmethod
    def from_config(cls, config: PubSubSinkConfig) -> "PubSubTransport":
        """
        Resolve credentials and open the topic.

        Raises:
            OSError: If the credentials file cannot be read
            ValueError: If credentials or topic are malformed
        """
        service_account = load_service_account(config.credentials)
        topic_path = resolve_topic_path(config.topic, service_account)

        loop = asyncio.new_event_loop()
        try:
            session, publisher = loop.run_until_complete(
                _open_publisher(config.credentials)
            )
        except Exception:
            loop.close()
            raise

        return cls(
            topic_path,
            publisher,
            loop,
            timeout=config.publish_timeout,
            session=session
        )

    @property
    def name(self) -> str:
        return "gcp_pubsub"

    def attempt(self, event: Event) -> None:
        """
        Publish one event, blocking until the publish completes.

        Raises:
            DeliveryError: If the event cannot be serialized
            Exception: Any error raised by the publish call
        """
        try:
            data = event.to_json()
        except ValueError as e:
            raise DeliveryError(self.name, f"cannot serialize event: {e}") from e

        response = self.loop.run_until_complete(self._publish(data))

        logger.debug(
            "Event published to Pub/Sub",
            topic=self.topic_path,
            variant=event.variant,
            message_ids=response.get("messageIds") if isinstance(response, dict) else None
        )

    async def _publish(self, data: str) -> Any:
        return await self.publisher.publish(
            self.topic_path,
            [PubsubMessage(data)],
            timeout=self.timeout
        )

    def close(self) -> None:
        if self.loop.is_closed():
            return
        try:
            self.loop.run_until_complete(self._close_clients())
        finally:
            self.loop.close()

    async def _close_clients(self) -> None:
        await self.publisher.close()
        if self._session is not None:
            await self._session.close()


async def _open_publisher(credentials: str):
    # aiohttp sessions bind to the loop that is running when they are created
    session = aiohttp.ClientSession()
    try:
        publisher = PublisherClient(service_file=credentials, session=session)
    except Exception:
        await session.close()
        raise
    return session, publisher
