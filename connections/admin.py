"""
Admin interface for connections app.
"""

from django.contrib import admin

from .models import BlockedUser, Follow, Friendship


@admin.register(Friendship)
class FriendshipAdmin(admin.ModelAdmin):
    list_display = ['requester', 'addressee', 'status', 'created_at', 'responded_at']
    list_filter = ['status', 'created_at']
    search_fields = ['requester__username', 'addressee__username']
    raw_id_fields = ['requester', 'addressee']


@admin.register(Follow)
class FollowAdmin(admin.ModelAdmin):
    list_display = ['follower', 'following', 'created_at']
    search_fields = ['follower__username', 'following__username']
    raw_id_fields = ['follower', 'following']


@admin.register(BlockedUser)
class BlockedUserAdmin(admin.ModelAdmin):
    list_display = ['blocker', 'blocked', 'reason', 'blocked_at']
    search_fields = ['blocker__username', 'blocked__username']
    raw_id_fields = ['blocker', 'blocked']
