"""
ViewSets for testimonies app API endpoints.
"""

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticatedOrReadOnly
from rest_framework.response import Response
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema, extend_schema_view

from core.api_tags import APITags, rate_limited_schema

from .serializers import (
    LikeStatusSerializer,
    TestimonyCommentSerializer,
    TestimonySerializer,
    TestimonyWriteSerializer,
    ViewStatusSerializer,
)
from .services import TestimonyService

User = get_user_model()


@extend_schema_view(
    list=extend_schema(
        tags=[APITags.TESTIMONIES],
        summary="List testimonies",
        description="Testimonies the caller is allowed to read, newest first."
    ),
    retrieve=extend_schema(
        tags=[APITags.TESTIMONIES],
        summary="Get testimony",
    ),
    partial_update=extend_schema(
        tags=[APITags.TESTIMONIES],
        summary="Update testimony",
        description="Only the owner may edit a testimony.",
        request=TestimonyWriteSerializer,
    ),
    destroy=extend_schema(
        tags=[APITags.TESTIMONIES],
        summary="Delete testimony",
    ),
)
class TestimonyViewSet(viewsets.GenericViewSet):
    """
    ViewSet for testimonies.

    Endpoints:
    - GET /testimonies/ - Testimonies visible to the caller
    - POST /testimonies/ - Share your testimony (one per user)
    - GET/PATCH/DELETE /testimonies/{id}/
    - GET /testimonies/user/{user_id}/ - A user's testimony
    - POST /testimonies/{id}/like/ - Toggle like
    - POST /testimonies/{id}/view/ - Record a view
    - GET/POST /testimonies/{id}/comments/
    - DELETE /testimonies/{id}/comments/{comment_id}/
    """

    serializer_class = TestimonySerializer
    permission_classes = [IsAuthenticatedOrReadOnly]
    lookup_value_regex = '[0-9a-fA-F-]{36}'
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        return TestimonyService.visible_to(self.request.user).order_by('-created_at')

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        return Response(self.get_serializer(queryset, many=True).data)

    @rate_limited_schema(
        APITags.TESTIMONIES,
        summary="Share testimony",
        description="Publish the caller's testimony. Each user has at most one.",
        request=TestimonyWriteSerializer,
        responses={201: TestimonySerializer}
    )
    def create(self, request, *args, **kwargs):
        serializer = TestimonyWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        testimony = TestimonyService.create_testimony(request.user, serializer.validated_data)
        testimony = TestimonyService.get_visible(testimony.pk, request.user)
        return Response(self.get_serializer(testimony).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        testimony = TestimonyService.get_visible(pk, request.user)
        return Response(self.get_serializer(testimony).data)

    def partial_update(self, request, pk=None):
        serializer = TestimonyWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        TestimonyService.update_testimony(request.user, pk, serializer.validated_data)
        testimony = TestimonyService.get_visible(pk, request.user)
        return Response(self.get_serializer(testimony).data)

    def destroy(self, request, pk=None):
        TestimonyService.delete_testimony(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=[APITags.TESTIMONIES],
        summary="Get a user's testimony",
        responses={200: TestimonySerializer}
    )
    @action(detail=False, methods=['get'], url_path=r'user/(?P<user_id>[0-9a-fA-F-]{36})')
    def for_user(self, request, user_id=None):
        owner = get_object_or_404(User, id=user_id)
        testimony = TestimonyService.get_for_user(owner, request.user)
        return Response(self.get_serializer(testimony).data)

    @rate_limited_schema(
        APITags.TESTIMONIES,
        summary="Like or unlike testimony",
        request=None,
        responses={200: LikeStatusSerializer}
    )
    @action(detail=True, methods=['post'])
    def like(self, request, pk=None):
        liked, like_count = TestimonyService.toggle_like(request.user, pk)
        return Response({'liked': liked, 'like_count': like_count})

    @extend_schema(
        tags=[APITags.TESTIMONIES],
        summary="Record testimony view",
        description="Counted once per viewer. The owner's own views are ignored.",
        request=None,
        responses={200: ViewStatusSerializer}
    )
    @action(detail=True, methods=['post'], url_path='view')
    def record_view(self, request, pk=None):
        recorded = TestimonyService.track_view(request.user, pk)
        return Response({'recorded': recorded})

    @extend_schema(
        tags=[APITags.TESTIMONIES],
        summary="List or add comments",
        request=TestimonyCommentSerializer,
        responses={200: TestimonyCommentSerializer(many=True), 201: TestimonyCommentSerializer}
    )
    @action(detail=True, methods=['get', 'post'])
    def comments(self, request, pk=None):
        if request.method == 'GET':
            comments = TestimonyService.comments(request.user, pk)
            page = self.paginate_queryset(comments)
            if page is not None:
                serializer = TestimonyCommentSerializer(page, many=True)
                return self.get_paginated_response(serializer.data)
            return Response(TestimonyCommentSerializer(comments, many=True).data)

        serializer = TestimonyCommentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment = TestimonyService.add_comment(request.user, pk, serializer.validated_data['content'])
        return Response(TestimonyCommentSerializer(comment).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=[APITags.TESTIMONIES],
        summary="Delete comment",
        description="Allowed for the comment author and the testimony owner.",
        responses={204: None}
    )
    @action(detail=True, methods=['delete'], url_path=r'comments/(?P<comment_id>[0-9a-fA-F-]{36})')
    def delete_comment(self, request, pk=None, comment_id=None):
        TestimonyService.delete_comment(request.user, pk, comment_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
