"""
Profiles app serializers for DRF API endpoints.
"""

from rest_framework import serializers
from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema_field

from connections.models import Follow

from .models import Church, UserProfile

User = get_user_model()


class UserSummarySerializer(serializers.ModelSerializer):
    """Minimal user info for nested display."""

    display_name = serializers.SerializerMethodField()
    avatar_url = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'display_name', 'avatar_url']
        read_only_fields = fields

    @extend_schema_field(serializers.CharField())
    def get_display_name(self, obj):
        profile = getattr(obj, 'profile', None)
        return profile.display_name_or_username if profile else obj.username

    @extend_schema_field(serializers.URLField(allow_blank=True))
    def get_avatar_url(self, obj):
        profile = getattr(obj, 'profile', None)
        return profile.avatar_url if profile else ''


class ChurchSerializer(serializers.ModelSerializer):
    """
    Church details. The invite code is only shown to members and the creator.
    """

    member_count = serializers.SerializerMethodField()
    invite_code = serializers.SerializerMethodField()

    class Meta:
        model = Church
        fields = [
            'id',
            'name',
            'slug',
            'city',
            'denomination',
            'member_count',
            'invite_code',
            'created_at',
        ]
        read_only_fields = ['id', 'slug', 'member_count', 'invite_code', 'created_at']

    @extend_schema_field(serializers.IntegerField())
    def get_member_count(self, obj):
        annotated = getattr(obj, 'member_count', None)
        if annotated is not None:
            return annotated
        return obj.members.count()

    @extend_schema_field(serializers.CharField(allow_null=True))
    def get_invite_code(self, obj):
        request = self.context.get('request')
        if not request or not request.user.is_authenticated:
            return None
        user = request.user
        if obj.created_by_id == user.pk:
            return obj.invite_code
        if UserProfile.objects.filter(user=user, church=obj).exists():
            return obj.invite_code
        return None


class ChurchCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    denomination = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')


class ChurchJoinSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=8, min_length=8)


class ChurchSummarySerializer(serializers.ModelSerializer):

    class Meta:
        model = Church
        fields = ['id', 'name', 'slug', 'city']
        read_only_fields = fields


class FollowCountsMixin(serializers.Serializer):
    follower_count = serializers.SerializerMethodField()
    following_count = serializers.SerializerMethodField()

    @extend_schema_field(serializers.IntegerField())
    def get_follower_count(self, obj):
        return Follow.objects.filter(following_id=obj.user_id).count()

    @extend_schema_field(serializers.IntegerField())
    def get_following_count(self, obj):
        return Follow.objects.filter(follower_id=obj.user_id).count()


class UserProfileSerializer(FollowCountsMixin, serializers.ModelSerializer):
    """
    The current user's own profile, privacy settings included.
    """

    id = serializers.UUIDField(source='user.id', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)
    display_name_or_username = serializers.CharField(read_only=True)
    church = ChurchSummarySerializer(read_only=True)

    class Meta:
        model = UserProfile
        fields = [
            'id',
            'username',
            'email',
            'display_name',
            'display_name_or_username',
            'bio',
            'avatar_url',
            'location',
            'church',
            'profile_visibility',
            'message_privacy',
            'follower_count',
            'following_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']


class UserProfileUpdateSerializer(serializers.ModelSerializer):

    class Meta:
        model = UserProfile
        fields = [
            'display_name',
            'bio',
            'avatar_url',
            'location',
            'profile_visibility',
            'message_privacy',
        ]


class UserProfilePublicSerializer(FollowCountsMixin, serializers.ModelSerializer):
    """
    A profile as seen by someone else. Privacy settings and email stay hidden.
    """

    id = serializers.UUIDField(source='user.id', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)
    display_name_or_username = serializers.CharField(read_only=True)
    church = ChurchSummarySerializer(read_only=True)

    class Meta:
        model = UserProfile
        fields = [
            'id',
            'username',
            'display_name',
            'display_name_or_username',
            'bio',
            'avatar_url',
            'location',
            'church',
            'follower_count',
            'following_count',
        ]
        read_only_fields = fields
