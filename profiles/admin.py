"""
Django admin configuration for profiles app.
"""

from django.contrib import admin

from .models import Church, UserProfile


@admin.register(Church)
class ChurchAdmin(admin.ModelAdmin):
    list_display = ['name', 'city', 'denomination', 'member_count', 'created_by', 'created_at']
    list_filter = ['denomination', 'created_at']
    search_fields = ['name', 'city', 'slug']
    readonly_fields = ['id', 'slug', 'invite_code', 'created_at']

    def member_count(self, obj):
        return obj.members.count()
    member_count.short_description = 'Members'


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    """Admin interface for user profiles and their privacy settings."""

    list_display = [
        'user', 'display_name', 'church', 'profile_visibility', 'message_privacy', 'created_at'
    ]
    list_filter = [
        'profile_visibility', 'message_privacy', 'created_at'
    ]
    search_fields = ['user__username', 'user__email', 'display_name', 'bio']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['user', 'church']
