"""
Module: test_sink_config.py
Description: Unit tests for sink configuration and runtime settings.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from config.sinks import (
    ErrorPolicy,
    PubSubSinkConfig,
    WebhookSinkConfig,
    parse_sink_config,
    resolve_policies,
)
from conftest import TestSettings


class TestParseSinkConfig:
    """Test cases for selecting the sink config by type."""

    def test_webhook_config(self):
        config = parse_sink_config({
            "type": "webhook",
            "url": "https://hooks.example.com/events",
            "authorization": "Bearer s3cret",
            "headers": {"X-Source": "relay"},
            "timeout": 5000,
            "error_policy": "continue",
        })

        assert isinstance(config, WebhookSinkConfig)
        assert config.timeout == 5000
        assert config.headers == {"X-Source": "relay"}
        assert config.error_policy is ErrorPolicy.CONTINUE

    def test_pubsub_config(self):
        config = parse_sink_config({
            "type": "gcp_pubsub",
            "topic": "chain-events",
            "credentials": "/etc/relay/sa.json",
            "retry_policy": {
                "max_retries": 3,
                "backoff_unit": 1000,
                "backoff_factor": 2,
                "max_backoff": 8000,
            },
        })

        assert isinstance(config, PubSubSinkConfig)
        assert config.publish_timeout == 10
        assert config.retry_policy.max_backoff == timedelta(seconds=8)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            parse_sink_config({"type": "kafka", "brokers": ["localhost:9092"]})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            parse_sink_config({"type": "webhook", "url": "https://x.test", "retries": 3})

    def test_missing_required_field_rejected(self):
        with pytest.raises(ValidationError):
            parse_sink_config({"type": "gcp_pubsub", "topic": "events"})


class TestErrorPolicy:
    """Test cases for ErrorPolicy values."""

    def test_lookup_is_case_insensitive(self):
        assert ErrorPolicy("Exit") is ErrorPolicy.EXIT
        assert ErrorPolicy("CONTINUE") is ErrorPolicy.CONTINUE

    def test_unknown_value_rejected(self):
        with pytest.raises(ValueError):
            ErrorPolicy("retry")


class TestResolvePolicies:
    """Test cases for applying runtime defaults."""

    def test_defaults(self, test_settings):
        config = WebhookSinkConfig(url="https://hooks.example.com")

        error_policy, retry_policy = resolve_policies(config, test_settings)

        assert error_policy is ErrorPolicy.EXIT
        assert retry_policy.max_retries == 20
        assert retry_policy.backoff_unit == timedelta(seconds=5)
        assert retry_policy.backoff_factor == 2
        assert retry_policy.max_backoff == timedelta(seconds=100)

    def test_configured_values_win(self, test_settings, fast_policy):
        config = WebhookSinkConfig(
            url="https://hooks.example.com",
            error_policy=ErrorPolicy.CONTINUE,
            retry_policy=fast_policy,
        )

        error_policy, retry_policy = resolve_policies(config, test_settings)

        assert error_policy is ErrorPolicy.CONTINUE
        assert retry_policy == fast_policy

    def test_defaults_follow_settings(self):
        settings = TestSettings(
            default_max_retries=4,
            default_backoff_unit_ms=200,
            default_max_backoff_ms=1000,
        )
        config = PubSubSinkConfig(topic="events", credentials="sa.json")

        _, retry_policy = resolve_policies(config, settings)

        assert retry_policy.max_retries == 4
        assert retry_policy.backoff_unit == timedelta(milliseconds=200)
        assert retry_policy.max_backoff == timedelta(seconds=1)


class TestRuntimeSettings:
    """Test cases for runtime settings validation."""

    def test_user_agent(self, test_settings):
        assert test_settings.user_agent == "event-relay/0.3.0"

    def test_log_level_normalized(self):
        assert TestSettings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            TestSettings(log_level="verbose")

    def test_backoff_unit_above_cap_rejected(self):
        with pytest.raises(ValidationError):
            TestSettings(default_backoff_unit_ms=5000, default_max_backoff_ms=1000)
