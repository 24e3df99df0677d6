"""Tests for event notifiers and the service registry"""
import json
from unittest.mock import MagicMock

import pytest

from aetherchat.config.settings import Settings
from aetherchat.services.notification.notifier import NullNotifier, RedisNotifier, build_notifier
from aetherchat.services.registry import build_registry


@pytest.mark.unit
class TestRedisNotifier:

    def test_publishes_json_on_event_channel(self):
        redis_client = MagicMock()
        notifier = RedisNotifier(redis_client, prefix="aetherchat")

        notifier.notify("appointment:created", {"id": "a-1", "service": "Gội đầu"})

        channel, message = redis_client.publish.call_args.args
        assert channel == "aetherchat:appointment:created"
        assert json.loads(message) == {
            "event": "appointment:created",
            "payload": {"id": "a-1", "service": "Gội đầu"},
        }

    def test_publish_failure_is_swallowed(self):
        redis_client = MagicMock()
        redis_client.publish.side_effect = ConnectionError("redis down")

        RedisNotifier(redis_client).notify("reminder:sent", {})

        redis_client.publish.assert_called_once()


@pytest.mark.unit
class TestBuildNotifier:

    def test_disabled(self):
        assert isinstance(build_notifier(Settings(NOTIFIER_ENABLED=False)), NullNotifier)

    def test_enabled_uses_prefix(self):
        notifier = build_notifier(Settings(NOTIFIER_ENABLED=True, NOTIFIER_CHANNEL_PREFIX="salon"), MagicMock())
        assert isinstance(notifier, RedisNotifier)
        assert notifier.channel_for("appointment:cancelled") == "salon:appointment:cancelled"

    def test_null_notifier_accepts_events(self):
        NullNotifier().notify("appointment:created", {"id": "x"})

    def test_registry(self):
        registry = build_registry(Settings(NOTIFIER_ENABLED=False))
        assert isinstance(registry.notifier, NullNotifier)
