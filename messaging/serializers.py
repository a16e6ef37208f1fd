"""
Serializers for messaging app.

Handles serialization/deserialization of direct messages and content
reports for the API.
"""

from django.utils.text import Truncator
from rest_framework import serializers
from drf_spectacular.utils import extend_schema_field

from profiles.serializers import UserSummarySerializer

from .models import ContentReport, DirectMessage
from .services import REVIEW_STATUSES

PREVIEW_LENGTH = 200


# =============================================================================
# DIRECT MESSAGE SERIALIZERS
# =============================================================================

class DirectMessageSerializer(serializers.ModelSerializer):
    sender = UserSummarySerializer(read_only=True)
    recipient = UserSummarySerializer(read_only=True)

    class Meta:
        model = DirectMessage
        fields = ['id', 'sender', 'recipient', 'content', 'is_read', 'read_at', 'created_at']
        read_only_fields = fields


class SendMessageSerializer(serializers.Serializer):
    """
    Serializer for sending a direct message.
    """
    recipient_id = serializers.UUIDField()
    content = serializers.CharField(max_length=5000)
    confirm_flagged = serializers.BooleanField(
        default=False,
        help_text="Send a message the content screen asked to confirm"
    )

    def validate_content(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Message cannot be empty.")
        return value


class ConversationSerializer(serializers.Serializer):
    """One conversation partner with the latest message."""
    user = UserSummarySerializer(read_only=True)
    last_message = DirectMessageSerializer(read_only=True)
    unread_count = serializers.IntegerField(read_only=True)


# =============================================================================
# CONTENT REPORT SERIALIZERS
# =============================================================================

class ContentReportCreateSerializer(serializers.Serializer):
    """
    Serializer for filing a report.

    ``target_id`` is the id of the user, testimony or message being reported.
    """
    report_type = serializers.ChoiceField(choices=ContentReport.TYPE_CHOICES)
    target_id = serializers.UUIDField()
    reason = serializers.ChoiceField(choices=ContentReport.REASON_CHOICES)
    details = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')

    def validate(self, attrs):
        allowed = ContentReport.REASONS_BY_TYPE[attrs['report_type']]
        if attrs['reason'] not in allowed:
            raise serializers.ValidationError({
                'reason': f"'{attrs['reason']}' is not a valid reason for a "
                          f"{attrs['report_type']} report."
            })
        return attrs


class ContentReportSerializer(serializers.ModelSerializer):
    """
    Detailed serializer for viewing content reports (moderators).
    """
    reporter = UserSummarySerializer(read_only=True)
    reported_user = UserSummarySerializer(read_only=True)
    reviewed_by = UserSummarySerializer(read_only=True)
    content_preview = serializers.SerializerMethodField()

    class Meta:
        model = ContentReport
        fields = [
            'id',
            'reporter',
            'report_type',
            'reported_user',
            'reported_testimony',
            'reported_message',
            'content_preview',
            'reason',
            'details',
            'status',
            'reviewed_by',
            'reviewed_at',
            'review_notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    @extend_schema_field(serializers.JSONField(allow_null=True))
    def get_content_preview(self, obj):
        """Short excerpt of the reported testimony or message for the dashboard."""
        if obj.report_type == ContentReport.TYPE_TESTIMONY:
            target, preview = obj.reported_testimony, {'type': 'testimony'}
        elif obj.report_type == ContentReport.TYPE_MESSAGE:
            target, preview = obj.reported_message, {'type': 'message'}
        else:
            return None

        if target is None:
            return "[Content deleted]"
        if obj.report_type == ContentReport.TYPE_TESTIMONY:
            preview['title'] = target.title
        preview['preview'] = Truncator(target.content).chars(PREVIEW_LENGTH)
        return preview


class ContentReportReviewSerializer(serializers.Serializer):
    """
    Serializer for reviewing reports.
    """
    status = serializers.ChoiceField(
        choices=list(REVIEW_STATUSES),
        help_text="New status for the report"
    )
    notes = serializers.CharField(
        max_length=500,
        required=False,
        allow_blank=True,
        help_text="Optional notes about the decision"
    )


class ReportCountsSerializer(serializers.Serializer):
    pending = serializers.IntegerField()
    reviewed = serializers.IntegerField()
    resolved = serializers.IntegerField()
    dismissed = serializers.IntegerField()
    total = serializers.IntegerField()
