"""
Admin interface for messaging app.
"""

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from .models import ContentReport, DirectMessage


@admin.register(DirectMessage)
class DirectMessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'sender', 'recipient', 'is_read', 'created_at']
    list_filter = ['is_read', 'created_at']
    search_fields = ['sender__username', 'recipient__username']
    raw_id_fields = ['sender', 'recipient']
    readonly_fields = ['created_at', 'read_at']


@admin.register(ContentReport)
class ContentReportAdmin(admin.ModelAdmin):
    list_display = ['id', 'report_type', 'reason', 'status', 'reporter_link',
                    'target_link', 'created_at']
    list_filter = ['status', 'report_type', 'reason']
    search_fields = ['reporter__username', 'reported_user__username', 'details']
    raw_id_fields = ['reporter', 'reported_user', 'reported_testimony',
                     'reported_message', 'reviewed_by']
    readonly_fields = ['reporter', 'report_type', 'reported_user', 'reported_testimony',
                       'reported_message', 'reason', 'details', 'created_at', 'updated_at']
    date_hierarchy = 'created_at'
    actions = ['dismiss_selected']

    @admin.display(description='Reporter')
    def reporter_link(self, obj):
        url = reverse('admin:authentication_user_change', args=[obj.reporter_id])
        return format_html('<a href="{}">{}</a>', url, obj.reporter.username)

    @admin.display(description='Target')
    def target_link(self, obj):
        if obj.reported_testimony_id:
            url = reverse('admin:testimonies_testimony_change', args=[obj.reported_testimony_id])
            return format_html('<a href="{}">testimony</a>', url)
        if obj.reported_message_id:
            url = reverse('admin:messaging_directmessage_change', args=[obj.reported_message_id])
            return format_html('<a href="{}">message</a>', url)
        return obj.reported_user

    @admin.action(description='Dismiss selected pending reports')
    def dismiss_selected(self, request, queryset):
        reports = queryset.filter(status=ContentReport.PENDING)
        count = 0
        for report in reports:
            report.dismiss(request.user, notes='Dismissed from admin')
            count += 1
        self.message_user(request, f'{count} report(s) dismissed.')

    def has_add_permission(self, request):
        return False
