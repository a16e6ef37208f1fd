"""
Serializers for groups app.
"""

from rest_framework import serializers
from drf_spectacular.utils import extend_schema_field

from profiles.serializers import UserSummarySerializer

from .models import Group, GroupMembership, GroupMessage


class GroupSerializer(serializers.ModelSerializer):
    """
    Group with its active member count and the caller's membership.
    """

    creator = UserSummarySerializer(read_only=True)
    member_count = serializers.IntegerField(read_only=True, default=0)
    my_role = serializers.SerializerMethodField()
    my_status = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'avatar_emoji',
            'is_private',
            'member_limit',
            'member_count',
            'creator',
            'my_role',
            'my_status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'creator', 'created_at', 'updated_at']

    def _membership(self, obj):
        request = self.context.get('request')
        if not request or not request.user.is_authenticated:
            return None
        return obj.memberships.filter(user=request.user).first()

    @extend_schema_field(serializers.CharField(allow_null=True))
    def get_my_role(self, obj):
        membership = self._membership(obj)
        return membership.role if membership else None

    @extend_schema_field(serializers.CharField(allow_null=True))
    def get_my_status(self, obj):
        membership = self._membership(obj)
        return membership.status if membership else None


class GroupWriteSerializer(serializers.ModelSerializer):

    class Meta:
        model = Group
        fields = ['name', 'description', 'avatar_emoji', 'is_private', 'member_limit']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Group name cannot be empty.")
        return value


class GroupMemberSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = GroupMembership
        fields = ['id', 'user', 'role', 'status', 'joined_at']
        read_only_fields = fields


class GroupMessageSerializer(serializers.ModelSerializer):
    sender = UserSummarySerializer(read_only=True)

    class Meta:
        model = GroupMessage
        fields = ['id', 'sender', 'content', 'is_flagged', 'flag_reasons', 'created_at']
        read_only_fields = fields


class SendGroupMessageSerializer(serializers.Serializer):
    content = serializers.CharField(max_length=2000)
    confirm_flagged = serializers.BooleanField(
        default=False,
        help_text="Send a message the content screen asked to confirm"
    )

    def validate_content(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Message cannot be empty.")
        return value


class PromoteMemberSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
