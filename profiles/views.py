"""
Profiles app views using DRF ViewSets and function-based views.
"""

from rest_framework import status, permissions
from rest_framework.decorators import api_view, permission_classes, action
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet
from rest_framework.mixins import CreateModelMixin, ListModelMixin, RetrieveModelMixin
from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiParameter
from drf_spectacular.openapi import OpenApiTypes
from core.api_tags import APITags, profile_schema, rate_limited_schema
import structlog

from .serializers import (
    ChurchCreateSerializer,
    ChurchJoinSerializer,
    ChurchSerializer,
    UserProfilePublicSerializer,
    UserProfileSerializer,
    UserProfileUpdateSerializer,
)
from .services import ChurchService, ProfileService

logger = structlog.get_logger(__name__)
User = get_user_model()


class UserProfileViewSet(GenericViewSet):
    """
    The current user's own profile.
    """

    serializer_class = UserProfileSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return ProfileService.get_or_create_profile(self.request.user)

    @extend_schema(
        operation_id='get_current_user_profile',
        summary='Get current user profile',
        description='Get the current authenticated user\'s profile and privacy settings.',
        tags=[APITags.USER_PROFILES],
        responses={200: UserProfileSerializer}
    )
    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return Response(serializer.data)

    @rate_limited_schema(
        APITags.USER_PROFILES,
        operation_id='partial_update_current_user_profile',
        summary='Update current user profile',
        description='Partially update the current user\'s profile and privacy settings.',
        request=UserProfileUpdateSerializer,
        responses={200: UserProfileSerializer}
    )
    def partial_update(self, request, *args, **kwargs):
        profile = self.get_object()
        serializer = UserProfileUpdateSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        profile = ProfileService.update_profile(request.user, serializer.validated_data)
        return Response(self.get_serializer(profile).data)


@profile_schema(
    operation_id='get_user_profile',
    summary='Get user profile',
    description='Get another user\'s profile. Private profiles are only visible '
                'to friends and members of the same church.',
    parameters=[
        OpenApiParameter(
            name='user_id',
            type=OpenApiTypes.UUID,
            location=OpenApiParameter.PATH,
            description='User ID'
        )
    ],
    responses={200: UserProfilePublicSerializer}
)
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def user_profile_view(request, user_id):
    """Get the profile of any user the caller is allowed to see."""
    profile = ProfileService.get_visible_profile(user_id, request.user)
    serializer = UserProfilePublicSerializer(profile, context={'request': request})
    return Response(serializer.data)


@extend_schema_view(
    list=extend_schema(
        tags=[APITags.USER_PROFILES],
        summary="List churches",
        description="List all churches with their member counts."
    ),
    retrieve=extend_schema(
        tags=[APITags.USER_PROFILES],
        summary="Get church",
        description="Get a church. The invite code is only included for members."
    ),
    create=extend_schema(
        tags=[APITags.USER_PROFILES],
        summary="Create church",
        description="Create a church. The creator becomes its first member.",
        request=ChurchCreateSerializer,
        responses={201: ChurchSerializer}
    ),
)
class ChurchViewSet(CreateModelMixin, ListModelMixin, RetrieveModelMixin, GenericViewSet):
    """
    Churches and church membership.
    """

    serializer_class = ChurchSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = '[0-9a-fA-F-]{36}'

    def get_queryset(self):
        return ChurchService.with_member_counts().order_by('name')

    def create(self, request, *args, **kwargs):
        serializer = ChurchCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        church = ChurchService.create_church(request.user, **serializer.validated_data)
        church = ChurchService.get_church(church.pk)
        return Response(self.get_serializer(church).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=[APITags.USER_PROFILES],
        summary="Join church",
        description="Join a church with its invite code. Leaves any current church.",
        request=ChurchJoinSerializer,
        responses={200: ChurchSerializer}
    )
    @action(detail=False, methods=['post'])
    def join(self, request):
        serializer = ChurchJoinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        church = ChurchService.join_by_code(request.user, serializer.validated_data['code'])
        church = ChurchService.get_church(church.pk)
        return Response(self.get_serializer(church).data)

    @extend_schema(
        tags=[APITags.USER_PROFILES],
        summary="Leave church",
        request=None,
        responses={204: None}
    )
    @action(detail=False, methods=['post'])
    def leave(self, request):
        ChurchService.leave(request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=[APITags.USER_PROFILES],
        summary="List church members",
        description="Members of the church whose profiles the caller may see.",
        responses={200: UserProfilePublicSerializer(many=True)}
    )
    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        church = self.get_object()
        members = ChurchService.members_visible_to(church, request.user)

        page = self.paginate_queryset(members)
        if page is not None:
            serializer = UserProfilePublicSerializer(page, many=True, context={'request': request})
            return self.get_paginated_response(serializer.data)

        serializer = UserProfilePublicSerializer(members, many=True, context={'request': request})
        return Response(serializer.data)

    @extend_schema(
        tags=[APITags.USER_PROFILES],
        summary="Regenerate invite code",
        description="Replace the church invite code. Only the creator may do this.",
        request=None,
        responses={200: ChurchSerializer}
    )
    @action(detail=True, methods=['post'], url_path='invite-code')
    def invite_code(self, request, pk=None):
        church = ChurchService.regenerate_invite_code(request.user, self.get_object())
        return Response(self.get_serializer(church).data)
