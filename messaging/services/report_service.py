"""
Content report service: filing reports and the moderation workflow.
"""

from django.contrib.auth import get_user_model
from django.db.models import Count
from rest_framework.exceptions import NotFound, ValidationError
import structlog

from core.exceptions import ConflictError
from core.logging.structured import log_security_event
from testimonies.services import TestimonyService

from ..models import ContentReport, DirectMessage

logger = structlog.get_logger(__name__)
User = get_user_model()

REVIEW_STATUSES = (ContentReport.REVIEWED, ContentReport.RESOLVED, ContentReport.DISMISSED)


class ReportService:
    """File and review reports about users, testimonies and messages."""

    @staticmethod
    def _resolve_target(reporter, report_type, target_id):
        """
        Return the fields that identify what is reported.

        The reported user is always filled in: for content it is the author.
        """
        if report_type == ContentReport.TYPE_USER:
            try:
                user = User.objects.get(pk=target_id)
            except User.DoesNotExist:
                raise NotFound("User not found.")
            return {'reported_user': user}

        if report_type == ContentReport.TYPE_TESTIMONY:
            testimony = TestimonyService.get_visible(target_id, reporter)
            return {'reported_user': testimony.user, 'reported_testimony': testimony}

        if report_type == ContentReport.TYPE_MESSAGE:
            try:
                message = DirectMessage.objects.select_related('sender').get(
                    pk=target_id, recipient=reporter)
            except DirectMessage.DoesNotExist:
                raise NotFound("Message not found.")
            return {'reported_user': message.sender, 'reported_message': message}

        raise ValidationError({'report_type': f"Unknown report type '{report_type}'."})

    @staticmethod
    def has_reported(reporter, target):
        return ContentReport.objects.filter(reporter=reporter, **target).exists()

    @staticmethod
    def create_report(reporter, report_type, target_id, reason, details='', request=None):
        """
        File a report. Each user can report the same thing only once.
        """
        allowed = ContentReport.REASONS_BY_TYPE.get(report_type)
        if allowed is None:
            raise ValidationError({'report_type': f"Unknown report type '{report_type}'."})
        if reason not in allowed:
            raise ValidationError({
                'reason': f"'{reason}' is not a valid reason for a {report_type} report."
            })

        target = ReportService._resolve_target(reporter, report_type, target_id)
        if target['reported_user'].pk == reporter.pk:
            raise ValidationError({'target_id': "You cannot report yourself or your own content."})

        # A testimony or message report is identified by the content itself
        lookup = {k: v for k, v in target.items() if k != 'reported_user'} or target
        if ReportService.has_reported(reporter, lookup):
            raise ConflictError("You have already reported this.")

        report = ContentReport.objects.create(
            reporter=reporter,
            report_type=report_type,
            reason=reason,
            details=details or '',
            **target,
        )

        logger.info(
            "Content reported",
            report_id=str(report.pk),
            reporter_id=str(reporter.pk),
            reported_user_id=str(report.reported_user_id),
            report_type=report_type,
            reason=reason,
        )
        log_security_event(
            'content_reported',
            request=request,
            details={'report_id': str(report.pk), 'report_type': report_type, 'reason': reason},
            user=reporter,
        )
        return report

    @staticmethod
    def review(report, reviewer, status, notes=''):
        if status == ContentReport.REVIEWED:
            report.mark_reviewed(reviewed_by=reviewer, notes=notes)
        elif status == ContentReport.RESOLVED:
            report.resolve(reviewed_by=reviewer, notes=notes)
        elif status == ContentReport.DISMISSED:
            report.dismiss(reviewed_by=reviewer, notes=notes)
        else:
            raise ValidationError({'status': f"Cannot move a report to '{status}'."})

        logger.info(
            "Report reviewed",
            report_id=str(report.pk),
            reviewer_id=str(reviewer.pk),
            status=status,
        )
        return report

    @staticmethod
    def counts():
        """Number of reports in each status, plus the total."""
        rows = ContentReport.objects.order_by().values('status').annotate(n=Count('id'))
        counts = {status: 0 for status, _ in ContentReport.STATUS_CHOICES}
        for row in rows:
            counts[row['status']] = row['n']
        counts['total'] = sum(counts.values())
        return counts
