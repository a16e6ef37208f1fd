"""
Messaging app models.

- DirectMessage: one-to-one messages between users
- ContentReport: user reports about users, testimonies and messages
"""

import uuid
from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class DirectMessageQuerySet(models.QuerySet):

    def between(self, user_a, user_b):
        return self.filter(
            Q(sender=user_a, recipient=user_b) |
            Q(sender=user_b, recipient=user_a)
        )

    def involving(self, user):
        return self.filter(Q(sender=user) | Q(recipient=user))

    def unread_for(self, user):
        return self.filter(recipient=user, is_read=False)


class DirectMessage(models.Model):
    """
    A private message from one user to another.

    Whether the sender may start the conversation is decided by the
    recipient's ``message_privacy`` (see ``privacy.policy``).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='messages_sent',
        help_text=_('User who sent the message')
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='messages_received',
        help_text=_('User the message was sent to')
    )
    content = models.TextField(
        max_length=5000,
        help_text=_('Message body')
    )

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    objects = DirectMessageQuerySet.as_manager()

    class Meta:
        db_table = 'messaging_direct_message'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['sender', 'recipient', '-created_at']),
            models.Index(fields=['recipient', 'is_read']),
        ]

    def __str__(self):
        return f"Message {self.id} from {self.sender} to {self.recipient}"

    def mark_read(self):
        if self.is_read:
            return
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=['is_read', 'read_at'])


class ContentReport(models.Model):
    """
    Reports of users or their content for moderation.

    Any user may report; staff review reports from the admin dashboard and
    mark them reviewed, resolved or dismissed.
    """

    # Report types
    TYPE_USER = 'user'
    TYPE_TESTIMONY = 'testimony'
    TYPE_MESSAGE = 'message'

    TYPE_CHOICES = [
        (TYPE_USER, _('User')),
        (TYPE_TESTIMONY, _('Testimony')),
        (TYPE_MESSAGE, _('Message')),
    ]

    # Report reasons
    HARASSMENT = 'harassment'
    SPAM = 'spam'
    IMPERSONATION = 'impersonation'
    INAPPROPRIATE = 'inappropriate_content'
    HATE_SPEECH = 'hate_speech'
    FALSE_INFORMATION = 'false_information'
    OFFENSIVE = 'offensive'
    THREATS = 'threats'
    OTHER = 'other'

    REASON_CHOICES = [
        (HARASSMENT, _('Harassment or bullying')),
        (SPAM, _('Spam or scam')),
        (IMPERSONATION, _('Impersonation')),
        (INAPPROPRIATE, _('Inappropriate content')),
        (HATE_SPEECH, _('Hate speech')),
        (FALSE_INFORMATION, _('False or misleading information')),
        (OFFENSIVE, _('Offensive or disrespectful')),
        (THREATS, _('Threats or violence')),
        (OTHER, _('Other (see details)')),
    ]

    # Which reasons make sense for which kind of report
    REASONS_BY_TYPE = {
        TYPE_USER: [HARASSMENT, SPAM, IMPERSONATION, INAPPROPRIATE, HATE_SPEECH, OTHER],
        TYPE_TESTIMONY: [INAPPROPRIATE, FALSE_INFORMATION, HATE_SPEECH, SPAM, OFFENSIVE, OTHER],
        TYPE_MESSAGE: [HARASSMENT, SPAM, INAPPROPRIATE, THREATS, HATE_SPEECH, OTHER],
    }

    # Report status
    PENDING = 'pending'
    REVIEWED = 'reviewed'
    RESOLVED = 'resolved'
    DISMISSED = 'dismissed'

    STATUS_CHOICES = [
        (PENDING, _('Pending review')),
        (REVIEWED, _('Reviewed')),
        (RESOLVED, _('Resolved (action taken)')),
        (DISMISSED, _('Dismissed (no action needed)')),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    reporter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='content_reports',
        help_text=_('User who made the report')
    )
    report_type = models.CharField(
        max_length=20,
        choices=TYPE_CHOICES,
        help_text=_('What is being reported')
    )
    reported_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='reports_against',
        help_text=_('User being reported, or the author of the reported content')
    )
    reported_testimony = models.ForeignKey(
        'testimonies.Testimony',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reports'
    )
    reported_message = models.ForeignKey(
        DirectMessage,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reports'
    )

    reason = models.CharField(
        max_length=30,
        choices=REASON_CHOICES,
        help_text=_('Reason for reporting')
    )
    details = models.TextField(
        blank=True,
        max_length=500,
        help_text=_('Additional details about the report')
    )

    # Review tracking
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=PENDING,
        help_text=_('Current status of the report')
    )
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_reports',
        help_text=_('Moderator who reviewed this report')
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    review_notes = models.TextField(
        blank=True,
        max_length=500,
        help_text=_('Notes from the reviewer')
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'messaging_content_report'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', '-created_at']),
            models.Index(fields=['report_type', 'status']),
            models.Index(fields=['reporter', '-created_at']),
        ]

    def __str__(self):
        return f"Report by {self.reporter.username} - {self.get_reason_display()} ({self.status})"

    def _review(self, status, reviewed_by, notes):
        self.status = status
        self.reviewed_by = reviewed_by
        self.reviewed_at = timezone.now()
        if notes:
            self.review_notes = notes
        self.save()

    def mark_reviewed(self, reviewed_by, notes=''):
        self._review(self.REVIEWED, reviewed_by, notes)

    def resolve(self, reviewed_by, notes=''):
        """Mark report as resolved."""
        self._review(self.RESOLVED, reviewed_by, notes)

    def dismiss(self, reviewed_by, notes=''):
        """Mark report as dismissed."""
        self._review(self.DISMISSED, reviewed_by, notes)
