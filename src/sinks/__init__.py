"""
Package: sinks
Description: Transports delivering events to external systems.

- base: Transport contract
- pubsub: Google Cloud Pub/Sub topic
- webhook: HTTP POST endpoint
"""

from .base import Transport
from .pubsub import PubSubTransport
from .webhook import WebhookTransport

__all__ = [
    "Transport",
    "PubSubTransport",
    "WebhookTransport",
]
