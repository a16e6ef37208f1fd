"""
Custom filters for messaging app.
"""

import django_filters

from messaging.models import ContentReport


class ContentReportFilter(django_filters.FilterSet):
    """
    Filters for the moderation dashboard.

    Supports filtering by:
    - status
    - report_type
    - reason
    - reported_user (UUID)
    - created_after / created_before (datetime)
    """

    reported_user = django_filters.UUIDFilter(field_name='reported_user_id', label='Reported user ID')
    created_after = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='gte')
    created_before = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='lte')

    class Meta:
        model = ContentReport
        fields = ['status', 'report_type', 'reason', 'reported_user']
