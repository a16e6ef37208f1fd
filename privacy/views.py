"""
Privacy views: ask the visibility policy about another user, and inspect
your own rate limits.
"""

from rest_framework import permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from core.api_tags import APITags
from core.rate_limiter import rate_limiter_for_user

from .policy import can_send_message, can_view_testimony, is_user_visible
from .serializers import PolicyDecisionSerializer, RateLimitStatusSerializer


def _decision_response(decision):
    return Response(PolicyDecisionSerializer(decision).data)


@extend_schema(
    tags=[APITags.PRIVACY],
    summary='Can I view this testimony?',
    description='Whether the caller may read the testimony of the given user.',
    responses={200: PolicyDecisionSerializer}
)
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def check_testimony_view(request, user_id):
    return _decision_response(can_view_testimony(user_id, request.user.pk))


@extend_schema(
    tags=[APITags.PRIVACY],
    summary='Can I message this user?',
    description='Whether the recipient\'s message privacy lets the caller start a conversation.',
    responses={200: PolicyDecisionSerializer}
)
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def check_message_view(request, user_id):
    return _decision_response(can_send_message(user_id, request.user.pk))


@extend_schema(
    tags=[APITags.PRIVACY],
    summary='Can I view this profile?',
    responses={200: PolicyDecisionSerializer}
)
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def check_profile_view(request, user_id):
    return _decision_response(is_user_visible(user_id, request.user.pk))


@extend_schema(
    tags=[APITags.PRIVACY],
    summary='My rate limits',
    description='Remaining attempts and current status for every rate-limited action.',
    responses={200: RateLimitStatusSerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def rate_limits_view(request):
    limiter = rate_limiter_for_user(request.user)

    statuses = []
    for action, rule in sorted(limiter.rules.items()):
        result = limiter.check(action)
        statuses.append({
            'action': action,
            'remaining': limiter.remaining_attempts(action),
            'max_attempts': rule.max_attempts,
            'window_seconds': rule.window_ms / 1000,
            'cooldown_seconds': rule.cooldown_ms / 1000,
            'allowed': result.allowed,
            'retry_after': result.retry_after,
        })

    return Response(RateLimitStatusSerializer(statuses, many=True).data)
