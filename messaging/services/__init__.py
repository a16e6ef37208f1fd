"""
Services for messaging app.
"""

from .content_filter import ContentFlag, analyze_content, screen_message
from .message_service import MessageService
from .report_service import REVIEW_STATUSES, ReportService

__all__ = [
    'ContentFlag',
    'MessageService',
    'ReportService',
    'REVIEW_STATUSES',
    'analyze_content',
    'screen_message',
]
