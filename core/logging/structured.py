"""
Structured logging for Lightning.

structlog is the front end every module logs through
(``structlog.get_logger(__name__)``). ``configure_structlog`` routes its
events into the stdlib handlers declared in ``settings.LOGGING`` so the
filters and formatters below apply to them too. A request's correlation ID
is bound into structlog's context variables and rides along on every event
logged while that request is being served.
"""

import json
import logging
import re
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

import structlog
from django.http import HttpRequest


# Attributes every LogRecord carries; anything else arrived through ``extra``
STANDARD_RECORD_ATTRS = frozenset([
    'name', 'msg', 'args', 'levelno', 'levelname', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'exc_info', 'exc_text',
    'stack_info', 'taskName', 'message', 'asctime',
])

REDACTED = '[FILTERED]'

# (pattern, replacement) pairs applied to every string that reaches a handler
REDACTIONS = [
    (re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'), '[EMAIL]'),
    (re.compile(r'eyJ[A-Za-z0-9-_=]+\.[A-Za-z0-9-_=]+\.?[A-Za-z0-9-_.+/=]*'), '[JWT_TOKEN]'),
    (re.compile(r'(password|token|secret)\s*[:=]\s*\S+', re.IGNORECASE), r'\1=' + REDACTED),
]

# Keys whose values never reach a log line: credentials and private user text
REDACTED_KEYS = frozenset([
    'password', 'token', 'access_token', 'refresh_token', 'secret', 'secret_key',
    'authorization', 'content', 'body', 'details', 'notes',
])


def redact(value):
    """Return ``value`` with credentials, emails and private text masked."""
    if isinstance(value, str):
        for pattern, replacement in REDACTIONS:
            value = pattern.sub(replacement, value)
        return value
    if isinstance(value, dict):
        return {
            key: REDACTED if str(key).lower() in REDACTED_KEYS else redact(item)
            for key, item in value.items()
        }
    return value


class SensitiveDataFilter(logging.Filter):
    """Mask sensitive values on a record before any handler formats it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(redact(arg) for arg in record.args)

        for key, value in list(record.__dict__.items()):
            if key in STANDARD_RECORD_ATTRS or key.startswith('_'):
                continue
            setattr(record, key, REDACTED if key.lower() in REDACTED_KEYS else redact(value))
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with every ``extra`` key lifted to the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        entry.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in STANDARD_RECORD_ATTRS and not key.startswith('_')
        )
        if record.exc_info and record.exc_info[0]:
            entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info),
            }
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_structlog():
    """Hand structlog events to stdlib logging as a message plus ``extra``."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def setup_request_logging(request: HttpRequest) -> str:
    """
    Bind a correlation ID for the request being served.

    Honors an incoming X-Correlation-ID header, otherwise generates one.
    """
    correlation_id = request.META.get('HTTP_X_CORRELATION_ID') or str(uuid.uuid4())
    request.correlation_id = correlation_id
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        correlation_id=correlation_id,
        request_path=request.path,
        request_method=request.method,
    )
    return correlation_id


def log_security_event(event_type: str, request: HttpRequest = None,
                       details: Dict[str, Any] = None, user=None):
    """
    Log to the ``security`` logger.

    Used for moderation-relevant events such as content reports. ``details``
    is emitted under its own key and is redacted by ``SensitiveDataFilter``
    before it reaches a handler.
    """
    event = {'event_type': event_type}
    if request is not None:
        event['ip_address'] = get_client_ip(request)
        event['user_agent'] = request.META.get('HTTP_USER_AGENT', '')
    if user is not None:
        event['user_id'] = str(user.pk)
    if details:
        event['event_details'] = details

    structlog.get_logger('security').info('security_event', **event)


def get_client_ip(request: HttpRequest) -> str:
    """First address in X-Forwarded-For, falling back to REMOTE_ADDR."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '')
