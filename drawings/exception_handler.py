# drawings/exception_handler.py

import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import BlockNotFound, FileNotFound

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """
    Project-wide DRF exception handler. Every error leaves the API as
    {"error": ...}, with "details" for validation problems.
    """
    if isinstance(exc, (FileNotFound, BlockNotFound)):
        exc = NotFound(str(exc))
    elif isinstance(exc, DjangoValidationError):
        exc = ValidationError(exc.messages)

    if isinstance(exc, IntegrityError):
        logger.warning(f"Integrity error on {context.get('view').__class__.__name__}: {exc}")
        return Response({"error": "Conflict", "details": [str(exc)]}, status=status.HTTP_409_CONFLICT)

    response = exception_handler(exc, context)
    if response is None:
        logger.error("Unhandled API error", exc_info=exc)
        body = {"error": str(exc) or "An unexpected internal server error occurred."}
        if not settings.DEBUG:
            body = {"error": "An unexpected internal server error occurred."}
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, ValidationError):
        response.data = {"error": "Validation failed", "details": response.data}
    else:
        response.data = {"error": response.data.get('detail', str(exc)) if isinstance(response.data, dict) else str(exc)}
    return response
