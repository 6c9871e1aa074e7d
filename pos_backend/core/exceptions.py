"""
API exception handler.

Wraps DRF's default handler so that errors DRF does not know about still
produce a JSON body and get logged with their traceback.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('pos_backend.core')


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None:
        return response

    request = context.get('request')
    method = getattr(request, 'method', '?')
    path = getattr(request, 'path', '?')

    if isinstance(exc, DjangoValidationError):
        return Response(
            {'error': 'Invalid request', 'message': exc.messages},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, IntegrityError):
        logger.warning(f"Integrity error in {method} {path}: {str(exc)}")
        return Response(
            {'error': 'Request conflicts with existing data', 'message': str(exc)},
            status=status.HTTP_400_BAD_REQUEST,
        )

    logger.error(f"Unhandled exception in {method} {path}: {str(exc)}", exc_info=exc)
    return Response(
        {'error': 'Internal server error', 'message': str(exc)},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
