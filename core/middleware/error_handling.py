"""
Correlation IDs and a Problem+JSON fallback for errors DRF never sees.

Views served by DRF already answer through
``core.exceptions.problem_exception_handler``. What reaches this middleware
is a database outage or an exception raised from a plain Django view.
"""

import uuid
from typing import NamedTuple, Optional

import structlog
from django.conf import settings
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import DatabaseError
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.deprecation import MiddlewareMixin

from ..logging.structured import get_client_ip, setup_request_logging

logger = structlog.get_logger(__name__)


class ErrorClass(NamedTuple):
    status: int
    title: str
    error_type: str
    # None means the exception's own message is safe to show
    public_detail: Optional[str]


SERVER_ERROR = ErrorClass(
    500, 'Internal Server Error', 'server_error',
    'An unexpected error occurred. Please try again.')

# Checked in order; the first isinstance match wins
ERROR_CLASSES = [
    (DatabaseError, ErrorClass(
        503, 'Service Temporarily Unavailable', 'database_error',
        'The service is temporarily unavailable. Please try again later.')),
    (ValidationError, ErrorClass(400, 'Bad Request', 'validation_error', None)),
    (PermissionDenied, ErrorClass(
        403, 'Forbidden', 'permission_error',
        'You do not have permission to access this resource.')),
]


def classify(exception: Exception) -> ErrorClass:
    for exc_type, error_class in ERROR_CLASSES:
        if isinstance(exception, exc_type):
            return error_class
    return SERVER_ERROR


class ErrorHandlingMiddleware(MiddlewareMixin):
    """Tag each response with X-Correlation-ID and render stray errors as Problem+JSON."""

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        setup_request_logging(request)
        return None

    def process_response(self, request: HttpRequest, response: HttpResponse) -> HttpResponse:
        correlation_id = getattr(request, 'correlation_id', None)
        if correlation_id:
            response['X-Correlation-ID'] = correlation_id
        return response

    def process_exception(self, request: HttpRequest, exception: Exception) -> HttpResponse:
        correlation_id = getattr(request, 'correlation_id', None) or str(uuid.uuid4())
        error = classify(exception)

        user = getattr(request, 'user', None)
        log = logger.bind(
            status_code=error.status,
            error_type=error.error_type,
            ip_address=get_client_ip(request),
            user_id=str(user.pk) if user is not None and user.is_authenticated else None,
        )
        if error.status >= 500:
            log.error("Unhandled server error", error=str(exception), exc_info=True)
        else:
            log.warning("Client error outside DRF", error=str(exception))

        if error.public_detail is not None:
            detail = error.public_detail
        else:
            messages = getattr(exception, 'messages', None)
            detail = '; '.join(messages) if messages else str(exception)

        body = {
            'type': 'about:blank',
            'title': error.title,
            'status': error.status,
            'detail': detail,
            'instance': request.build_absolute_uri(),
            'correlation_id': correlation_id,
        }
        if settings.DEBUG and error.status >= 500:
            body['debug'] = {
                'exception_type': type(exception).__name__,
                'exception_message': str(exception),
            }

        response = JsonResponse(body, status=error.status, content_type='application/problem+json')
        response['X-Correlation-ID'] = correlation_id
        return response
