# aetherchat/api/dependencies.py
"""Shared FastAPI dependencies and domain error translation"""
import logging

from fastapi import HTTPException, Request, status

from aetherchat.core.exceptions import (
    AetherChatError,
    BookingError,
    NoSessionsRemaining,
    NotFoundError,
    ReminderStateError,
    SlotUnavailable,
)
from aetherchat.services.ai.ai_service import AIService
from aetherchat.services.notification.notifier import Notifier
from aetherchat.services.registry import ServiceRegistry

logger = logging.getLogger(__name__)


def get_registry(request: Request) -> ServiceRegistry:
    """Registry built in the application lifespan"""
    return request.app.state.registry


def get_notifier(request: Request) -> Notifier:
    return get_registry(request).notifier


def get_ai_service(request: Request) -> AIService:
    return get_registry(request).ai_service


def http_error(exc: AetherChatError) -> HTTPException:
    """
    Map a domain error to an HTTP error:
    404 missing records, 409 conflicts with current state, 400 bad input.
    """
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    if isinstance(exc, SlotUnavailable):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": str(exc),
                "reason": exc.reason,
                "suggested_slots": [s.model_dump() for s in exc.suggested_slots],
            },
        )

    if isinstance(exc, (NoSessionsRemaining, BookingError, ReminderStateError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
