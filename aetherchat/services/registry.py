# aetherchat/services/registry.py
"""
Process-wide collaborators, built once at startup (FastAPI lifespan or Celery
worker) and handed to the code that needs them.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from aetherchat.config.settings import Settings, get_settings
from aetherchat.services.ai.ai_service import AIService
from aetherchat.services.notification.notifier import Notifier, build_notifier

logger = logging.getLogger(__name__)


@dataclass
class ServiceRegistry:
    settings: Settings
    notifier: Notifier
    _ai_service: Optional[AIService] = field(default=None, repr=False)

    @property
    def ai_service(self) -> AIService:
        """Created on first use so processes without OpenAI access still start"""
        if self._ai_service is None:
            self._ai_service = AIService(settings=self.settings)
        return self._ai_service


def build_registry(settings: Optional[Settings] = None, redis_client=None) -> ServiceRegistry:
    settings = settings or get_settings()
    notifier = build_notifier(settings, redis_client)
    logger.info(f"Service registry built with {type(notifier).__name__}")
    return ServiceRegistry(settings=settings, notifier=notifier)
