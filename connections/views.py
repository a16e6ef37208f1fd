"""
Connections app views: friends, followers and blocks.
"""

from rest_framework import status, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from core.api_tags import APITags, rate_limited_schema
from core.exceptions import PolicyDenied
from privacy.policy import is_user_visible
from profiles.serializers import UserSummarySerializer

from .serializers import (
    BlockedUserSerializer,
    BlockUserSerializer,
    FollowStatusSerializer,
    FriendRequestSerializer,
    SendFriendRequestSerializer,
)
from .services import BlockService, FollowService, FriendshipService

User = get_user_model()


def _paginated(request, queryset, serializer_class):
    paginator = PageNumberPagination()
    page = paginator.paginate_queryset(queryset, request)
    serializer = serializer_class(page, many=True, context={'request': request})
    return paginator.get_paginated_response(serializer.data)


def _visible_user(request, user_id):
    user = get_object_or_404(User, id=user_id)
    decision = is_user_visible(user.pk, request.user.pk)
    if not decision:
        raise PolicyDenied(decision.reason)
    return user


# =============================================================================
# FRIENDS
# =============================================================================

@extend_schema(
    tags=[APITags.CONNECTIONS],
    summary='List friends',
    responses={200: UserSummarySerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def friends_list_view(request):
    """Accepted friends of the current user."""
    friends = FriendshipService.friends_of(request.user).select_related('profile')
    return _paginated(request, friends, UserSummarySerializer)


@extend_schema(
    tags=[APITags.CONNECTIONS],
    summary='List incoming friend requests',
    responses={200: FriendRequestSerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def incoming_requests_view(request):
    requests = FriendshipService.incoming_requests(request.user)
    return _paginated(request, requests, FriendRequestSerializer)


@extend_schema(
    tags=[APITags.CONNECTIONS],
    summary='List sent friend requests',
    responses={200: FriendRequestSerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def sent_requests_view(request):
    requests = FriendshipService.sent_requests(request.user)
    return _paginated(request, requests, FriendRequestSerializer)


@rate_limited_schema(
    APITags.CONNECTIONS,
    summary='Send friend request',
    description='Send a friend request. If the other user already sent one, '
                'it is accepted instead.',
    request=SendFriendRequestSerializer,
    responses={201: FriendRequestSerializer, 200: FriendRequestSerializer}
)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def send_request_view(request):
    serializer = SendFriendRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    target = get_object_or_404(User, id=serializer.validated_data['user_id'])
    friendship = FriendshipService.send_request(request.user, target)

    response_status = status.HTTP_201_CREATED if friendship.status == friendship.STATUS_PENDING \
        else status.HTTP_200_OK
    return Response(FriendRequestSerializer(friendship).data, status=response_status)


@extend_schema(
    tags=[APITags.CONNECTIONS],
    summary='Accept friend request',
    request=None,
    responses={200: FriendRequestSerializer}
)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def accept_request_view(request, request_id):
    friendship = FriendshipService.accept_request(request.user, request_id)
    return Response(FriendRequestSerializer(friendship).data)


@extend_schema(
    tags=[APITags.CONNECTIONS],
    summary='Decline friend request',
    request=None,
    responses={200: FriendRequestSerializer}
)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def decline_request_view(request, request_id):
    friendship = FriendshipService.decline_request(request.user, request_id)
    return Response(FriendRequestSerializer(friendship).data)


@extend_schema(
    tags=[APITags.CONNECTIONS],
    summary='Remove friend',
    responses={204: None}
)
@api_view(['DELETE'])
@permission_classes([permissions.IsAuthenticated])
def remove_friend_view(request, user_id):
    other = get_object_or_404(User, id=user_id)
    FriendshipService.remove_friend(request.user, other)
    return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    tags=[APITags.CONNECTIONS],
    summary='List mutual friends',
    responses={200: UserSummarySerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def mutual_friends_view(request, user_id):
    other = _visible_user(request, user_id)
    mutual = FriendshipService.mutual_friends(request.user, other).select_related('profile')
    return _paginated(request, mutual, UserSummarySerializer)


# =============================================================================
# FOLLOWERS
# =============================================================================

@extend_schema(
    tags=[APITags.CONNECTIONS],
    summary='Follow or unfollow a user',
    description='POST follows a public profile; following twice is a no-op. '
                'DELETE unfollows.',
    request=None,
    responses={200: FollowStatusSerializer, 201: FollowStatusSerializer}
)
@api_view(['POST', 'DELETE'])
@permission_classes([permissions.IsAuthenticated])
def follow_view(request, user_id):
    target = get_object_or_404(User, id=user_id)

    if request.method == 'DELETE':
        FollowService.unfollow(request.user, target)
        data = {
            'following': False,
            'follower_count': FollowService.counts(target)['followers'],
        }
        return Response(data)

    _, created = FollowService.follow(request.user, target)
    data = {
        'following': True,
        'created': created,
        'follower_count': FollowService.counts(target)['followers'],
    }
    return Response(data, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@extend_schema(
    tags=[APITags.CONNECTIONS],
    summary='List followers',
    responses={200: UserSummarySerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def followers_view(request, user_id):
    user = _visible_user(request, user_id)
    followers = FollowService.followers_of(user).select_related('profile')
    return _paginated(request, followers, UserSummarySerializer)


@extend_schema(
    tags=[APITags.CONNECTIONS],
    summary='List followed users',
    responses={200: UserSummarySerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def following_view(request, user_id):
    user = _visible_user(request, user_id)
    following = FollowService.following_of(user).select_related('profile')
    return _paginated(request, following, UserSummarySerializer)


# =============================================================================
# BLOCKS
# =============================================================================

@extend_schema(
    tags=[APITags.CONNECTIONS],
    summary='List or create blocks',
    description='GET lists users the caller has blocked. POST blocks a user.',
    request=BlockUserSerializer,
    responses={200: BlockedUserSerializer(many=True), 201: BlockedUserSerializer}
)
@api_view(['GET', 'POST'])
@permission_classes([permissions.IsAuthenticated])
def blocks_view(request):
    if request.method == 'GET':
        return _paginated(request, BlockService.blocked_by(request.user), BlockedUserSerializer)

    serializer = BlockUserSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    target = get_object_or_404(User, id=serializer.validated_data['user_id'])
    block = BlockService.block(request.user, target, serializer.validated_data['reason'])
    return Response(BlockedUserSerializer(block).data, status=status.HTTP_201_CREATED)


@extend_schema(
    tags=[APITags.CONNECTIONS],
    summary='Unblock user',
    responses={204: None}
)
@api_view(['DELETE'])
@permission_classes([permissions.IsAuthenticated])
def unblock_view(request, user_id):
    target = get_object_or_404(User, id=user_id)
    BlockService.unblock(request.user, target)
    return Response(status=status.HTTP_204_NO_CONTENT)
