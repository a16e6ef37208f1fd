"""
Serializers for connections app.
"""

from rest_framework import serializers

from profiles.serializers import UserSummarySerializer

from .models import BlockedUser, Friendship


class FriendRequestSerializer(serializers.ModelSerializer):
    """A pending or answered friend request, both sides shown."""

    requester = UserSummarySerializer(read_only=True)
    addressee = UserSummarySerializer(read_only=True)

    class Meta:
        model = Friendship
        fields = ['id', 'requester', 'addressee', 'status', 'created_at', 'responded_at']
        read_only_fields = fields


class SendFriendRequestSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()


class BlockedUserSerializer(serializers.ModelSerializer):
    blocked = UserSummarySerializer(read_only=True)

    class Meta:
        model = BlockedUser
        fields = ['id', 'blocked', 'reason', 'blocked_at']
        read_only_fields = fields


class BlockUserSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class FollowStatusSerializer(serializers.Serializer):
    following = serializers.BooleanField()
    created = serializers.BooleanField(required=False)
    follower_count = serializers.IntegerField()
