"""API error handling shared by every app."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler


logger = logging.getLogger(__name__)


class SlotUnavailable(DjangoValidationError):
    """Raised when a venue cannot host a booking at the requested time."""

    def __init__(self, reason: str):
        super().__init__(reason, code="slot_unavailable")
        self.reason = reason


def _validation_detail(exc: DjangoValidationError) -> Any:
    if hasattr(exc, "error_dict"):
        return exc.message_dict
    messages = exc.messages
    return messages[0] if len(messages) == 1 else messages


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """Translate domain errors raised by services into API responses."""

    if isinstance(exc, SlotUnavailable):
        return Response({"detail": exc.reason}, status=status.HTTP_409_CONFLICT)

    if isinstance(exc, DjangoValidationError):
        return Response({"detail": _validation_detail(exc)}, status=status.HTTP_400_BAD_REQUEST)

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        request = context.get("request")
        logger.exception(
            "Unhandled error in %s %s",
            getattr(request, "method", "?"),
            getattr(view, "__class__", type(None)).__name__,
        )
    return response
