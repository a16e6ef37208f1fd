"""
Serializers for testimonies app.
"""

from rest_framework import serializers
from drf_spectacular.utils import extend_schema_field

from profiles.serializers import UserSummarySerializer

from .models import Testimony, TestimonyComment


class TestimonySerializer(serializers.ModelSerializer):
    """
    Testimony with author and interaction counts.
    """

    user = UserSummarySerializer(read_only=True)
    like_count = serializers.IntegerField(read_only=True, default=0)
    view_count = serializers.IntegerField(read_only=True, default=0)
    comment_count = serializers.IntegerField(read_only=True, default=0)
    is_liked = serializers.SerializerMethodField()
    is_owner = serializers.SerializerMethodField()

    class Meta:
        model = Testimony
        fields = [
            'id',
            'user',
            'title',
            'content',
            'lesson',
            'word_count',
            'visibility',
            'like_count',
            'view_count',
            'comment_count',
            'is_liked',
            'is_owner',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'user', 'word_count', 'created_at', 'updated_at']

    def _user(self):
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return request.user
        return None

    @extend_schema_field(serializers.BooleanField())
    def get_is_liked(self, obj):
        user = self._user()
        return user is not None and obj.likes.filter(user=user).exists()

    @extend_schema_field(serializers.BooleanField())
    def get_is_owner(self, obj):
        user = self._user()
        return user is not None and obj.user_id == user.pk


class TestimonyWriteSerializer(serializers.ModelSerializer):

    class Meta:
        model = Testimony
        fields = ['title', 'content', 'lesson', 'visibility']

    def validate_content(self, value):
        value = value.strip()
        if len(value) < 20:
            raise serializers.ValidationError("Testimony must be at least 20 characters.")
        return value


class TestimonyCommentSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)

    class Meta:
        model = TestimonyComment
        fields = ['id', 'author', 'content', 'created_at']
        read_only_fields = ['id', 'author', 'created_at']

    def validate_content(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Comment cannot be empty.")
        return value


class LikeStatusSerializer(serializers.Serializer):
    liked = serializers.BooleanField()
    like_count = serializers.IntegerField()


class ViewStatusSerializer(serializers.Serializer):
    recorded = serializers.BooleanField()
