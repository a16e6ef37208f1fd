"""
Admin interface for groups app.
"""

from django.contrib import admin

from .models import Group, GroupMembership, GroupMessage


class GroupMembershipInline(admin.TabularInline):
    model = GroupMembership
    extra = 0
    raw_id_fields = ['user']
    readonly_fields = ['joined_at']


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    list_display = ['name', 'creator', 'is_private', 'member_limit', 'created_at']
    list_filter = ['is_private', 'created_at']
    search_fields = ['name', 'description']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['creator']
    inlines = [GroupMembershipInline]


@admin.register(GroupMessage)
class GroupMessageAdmin(admin.ModelAdmin):
    list_display = ['group', 'sender', 'is_flagged', 'created_at']
    list_filter = ['is_flagged', 'created_at']
    raw_id_fields = ['group', 'sender']
