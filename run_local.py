#!/usr/bin/env python3
"""
Local webhook sink runner.

Replays events from an NDJSON file (one event per line) through a
webhook sink, for trying an endpoint out during development.

Usage:
    python run_local.py --url http://127.0.0.1:8000/events --events events.ndjson
    python run_local.py --url ... --events ... --error-policy continue --max-retries 2
"""

import argparse
import sys
from datetime import timedelta
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from config.settings import settings  # noqa: E402
from config.sinks import ErrorPolicy, RetryPolicy, WebhookSinkConfig  # noqa: E402
from delivery.bootstrap import bootstrap_sink  # noqa: E402
from delivery.errors import SinkConfigError  # noqa: E402
from models.event import Event  # noqa: E402
from pipeline.channel import EventChannel  # noqa: E402
from pipeline.progress import ProgressTracker  # noqa: E402


def main():
    parser = argparse.ArgumentParser(
        description="Deliver NDJSON events to a webhook endpoint"
    )
    parser.add_argument("--url", required=True, help="Webhook endpoint URL")
    parser.add_argument(
        "--events",
        type=Path,
        required=True,
        help="NDJSON file with one event per line"
    )
    parser.add_argument(
        "--authorization",
        default=None,
        help="Authorization header value (e.g. 'Bearer <token>')"
    )
    parser.add_argument(
        "--error-policy",
        choices=[policy.value for policy in ErrorPolicy],
        default=ErrorPolicy.EXIT.value,
        help="What to do once an event exhausts its retries (default: exit)"
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=3,
        help="Retries per event after the first attempt (default: 3)"
    )
    parser.add_argument(
        "--backoff-ms",
        type=int,
        default=500,
        help="Delay before the first retry in milliseconds (default: 500)"
    )

    args = parser.parse_args()

    if not args.events.exists():
        print(f"ERROR: events file not found: {args.events}")
        sys.exit(1)

    config = WebhookSinkConfig(
        url=args.url,
        authorization=args.authorization,
        error_policy=ErrorPolicy(args.error_policy),
        retry_policy=RetryPolicy(
            max_retries=args.max_retries,
            backoff_unit=timedelta(milliseconds=args.backoff_ms),
            backoff_factor=2,
            max_backoff=timedelta(milliseconds=args.backoff_ms * 20),
        ),
    )

    channel = EventChannel(capacity=100)
    tracker = ProgressTracker("webhook")

    try:
        handle = bootstrap_sink(config, channel, notify=tracker, settings=settings)
    except SinkConfigError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print("=" * 60)
    print(f"Delivering {args.events} to {args.url}")
    print("=" * 60)

    try:
        with args.events.open(encoding="utf-8") as fh:
            for line in fh:
                if line.strip():
                    channel.put(Event.from_json(line))
    finally:
        channel.close()

    try:
        handle.join()
    except Exception as e:
        print(f"Sink stopped: {e!r}")
        sys.exit(2)
    finally:
        print(f"Events picked up: {tracker.snapshot().events}")


if __name__ == "__main__":
    main()
