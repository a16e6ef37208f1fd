"""
Custom exception handlers for the Lightning API.

Implements Problem+JSON (RFC 7807) for standardized error responses.
"""

from http import HTTPStatus

import structlog
from rest_framework import status
from rest_framework.views import exception_handler
from rest_framework.exceptions import APIException


logger = structlog.get_logger(__name__)

PROBLEM_CONTENT_TYPE = 'application/problem+json'


class ProblemDetailException(APIException):
    """
    Base for API errors that carry their own Problem+JSON title.

    Subclasses pin the status code; ``detail`` is the user-facing reason.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'A problem occurred'
    default_code = 'error'
    title = 'Error'

    def __init__(self, detail=None):
        super().__init__(detail or self.default_detail)


class PolicyDenied(ProblemDetailException):
    """Raised when the visibility/permission policy refuses an action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'policy_denied'
    title = 'Forbidden'

    def __init__(self, reason=None):
        super().__init__(reason)


class RateLimitExceeded(ProblemDetailException):
    """Raised when an action is attempted too often."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = 'Too many requests. Please try again later.'
    default_code = 'rate_limited'
    title = 'Too Many Requests'

    def __init__(self, retry_after=None, reason=None):
        self.retry_after = retry_after
        super().__init__(reason)


class ConflictError(ProblemDetailException):
    """Raised when a write would duplicate an existing resource."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This resource already exists.'
    default_code = 'conflict'
    title = 'Conflict'


def problem_exception_handler(exc, context):
    """
    DRF exception handler rendering every API error as Problem+JSON.

    400s list field errors under ``invalid_params``. A ``retry_after`` on
    the exception becomes both a body field and the Retry-After header.
    Anything DRF itself does not handle is returned as None so Django's
    own handling (and ``ErrorHandlingMiddleware``) takes over.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    problem = {
        'type': 'about:blank',
        'title': getattr(exc, 'title', None) or status_title(response.status_code),
        'status': response.status_code,
        'detail': first_detail(response.data),
    }

    request = context.get('request')
    if request is not None:
        problem['instance'] = request.build_absolute_uri()

    if response.status_code == status.HTTP_400_BAD_REQUEST:
        problem['invalid_params'] = invalid_params(response.data)

    retry_after = getattr(exc, 'retry_after', None)
    if retry_after is not None:
        problem['retry_after'] = retry_after
        response['Retry-After'] = str(retry_after)

    _log_api_error(exc, request, response.status_code)

    response.data = problem
    # Response.rendered_content rewrites Content-Type from this attribute
    response.content_type = PROBLEM_CONTENT_TYPE
    response['Content-Type'] = PROBLEM_CONTENT_TYPE
    return response


def status_title(status_code):
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return 'Error'


def first_detail(data):
    """Pick one human-readable message out of DRF's error payload."""
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        if data.get('non_field_errors'):
            return '; '.join(str(error) for error in data['non_field_errors'])
        for field, errors in data.items():
            if isinstance(errors, list) and errors:
                return f"{field}: {errors[0]}"
            if isinstance(errors, str):
                return f"{field}: {errors}"
    elif isinstance(data, list) and data:
        return str(data[0])
    return str(data)


def invalid_params(data):
    """Flatten serializer errors into ``[{'name': field, 'reason': message}]``."""
    if not isinstance(data, dict):
        return []

    params = []
    for field, errors in data.items():
        for error in (errors if isinstance(errors, list) else [errors]):
            params.append({'name': field, 'reason': str(error)})
    return params


def _log_api_error(exc, request, status_code):
    user = getattr(request, 'user', None)
    log = logger.bind(
        status_code=status_code,
        exception_type=type(exc).__name__,
        user_id=str(user.pk) if user is not None and user.is_authenticated else None,
    )
    if status_code >= 500:
        log.error("API error", error=str(exc), exc_info=True)
    else:
        log.warning("API error", error=str(exc))
