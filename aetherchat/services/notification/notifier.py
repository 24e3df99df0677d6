# aetherchat/services/notification/notifier.py
"""
Event notifications for connected staff clients.

Services receive a Notifier through the registry instead of reaching for a
global socket handle. RedisNotifier publishes on pub/sub channels that the
realtime gateway subscribes to.
"""
import json
import logging
from typing import Any, Dict, Optional, Protocol

from aetherchat.config.redis import RedisKeys, get_sync_redis

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, event_kind: str, payload: Dict[str, Any]) -> None:
        ...


class NullNotifier:
    """Drops every event"""

    def notify(self, event_kind: str, payload: Dict[str, Any]) -> None:
        logger.debug(f"Dropped notification {event_kind}")


class RedisNotifier:
    """Publishes JSON payloads to '{prefix}:{event_kind}'"""

    def __init__(self, redis_client, prefix: str = "aetherchat"):
        self.redis = redis_client
        self.prefix = prefix

    def channel_for(self, event_kind: str) -> str:
        return RedisKeys.EVENT_CHANNEL.format(prefix=self.prefix, event_kind=event_kind)

    def notify(self, event_kind: str, payload: Dict[str, Any]) -> None:
        """Fire and forget: publishing failures are logged, never raised"""
        channel = self.channel_for(event_kind)
        message = json.dumps({"event": event_kind, "payload": payload}, default=str, ensure_ascii=False)
        try:
            receivers = self.redis.publish(channel, message)
            logger.debug(f"Published {event_kind} to {channel} ({receivers} receivers)")
        except Exception as e:
            logger.error(f"Failed to publish {event_kind} to {channel}: {e}")


def build_notifier(settings, redis_client: Optional[Any] = None) -> Notifier:
    """Notifier for the given application settings"""
    if not settings.NOTIFIER_ENABLED:
        return NullNotifier()

    if redis_client is None:
        redis_client = get_sync_redis()

    return RedisNotifier(redis_client, prefix=settings.NOTIFIER_CHANNEL_PREFIX)
