# backend/exception_handler.py

"""
DRF EXCEPTION HANDLER

Wired through REST_FRAMEWORK["EXCEPTION_HANDLER"].

Mapping:
- DRF APIException (validation, auth, throttling) -> DRF default response
- LedgerError subclasses                          -> {"detail": msg}, exc.status_code
- django.core.exceptions.ValidationError          -> 400 with messages
- Http404 / ObjectDoesNotExist                    -> 404
- anything else                                   -> logged, generic 500
"""

from __future__ import annotations

import logging

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from backend.errors import LedgerError

logger = logging.getLogger(__name__)


def _validation_detail(exc: ValidationError):
    if hasattr(exc, "message_dict"):
        return exc.message_dict
    return exc.messages


def api_exception_handler(exc, context):
    response = drf_exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else None

    if isinstance(exc, LedgerError):
        logger.info(
            "ledger error",
            extra={"view": view_name, "error": exc.__class__.__name__, "detail": exc.message},
        )
        return Response({"detail": exc.message}, status=exc.status_code)

    if isinstance(exc, ValidationError):
        return Response(
            {"detail": _validation_detail(exc)}, status=status.HTTP_400_BAD_REQUEST
        )

    if isinstance(exc, ObjectDoesNotExist):
        return Response({"detail": "Not found"}, status=status.HTTP_404_NOT_FOUND)

    logger.exception("unhandled error", extra={"view": view_name})
    return Response(
        {"detail": "Internal server error"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
