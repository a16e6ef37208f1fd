"""
Unified API Documentation Tags for the Lightning platform.

This module provides a single source of truth for all API documentation tags
to prevent duplicate sections in the OpenAPI/Swagger documentation.
"""

from drf_spectacular.utils import extend_schema, OpenApiExample


class APITags:
    """
    Unified API tags for consistent documentation organization.

    Usage:
        @extend_schema(tags=[APITags.TESTIMONIES])
        def my_view(request):
            pass
    """

    AUTHENTICATION = "Authentication"  # Token issue and refresh
    USER_PROFILES = "User Profiles"  # Profile management, churches, privacy flags
    CONNECTIONS = "Connections"  # Friends, followers, blocking
    TESTIMONIES = "Testimonies"  # Testimony CRUD, likes, views, comments
    MESSAGING = "Messaging"  # Direct messages
    MODERATION = "Moderation"  # Content reports and the admin dashboard
    PRIVACY = "Privacy"  # Permission checks and rate-limit status
    GROUPS = "Groups"  # Fellowship groups, join requests, group chat


# Tag descriptions for OpenAPI documentation
TAG_DESCRIPTIONS = {
    APITags.AUTHENTICATION: "JWT token issue and refresh",
    APITags.USER_PROFILES: "User profiles, church membership and privacy settings",
    APITags.CONNECTIONS: "Friend requests, followers and blocked users",
    APITags.TESTIMONIES: "Personal faith stories with tiered visibility",
    APITags.MESSAGING: "One-to-one direct messages",
    APITags.MODERATION: "Reporting users, testimonies and messages",
    APITags.PRIVACY: "Visibility and permission checks",
    APITags.GROUPS: "Fellowship groups with leader-approved membership and group chat",
}


def get_api_tags_metadata():
    """
    Returns OpenAPI tags metadata for Spectacular configuration.

    Add this to your SPECTACULAR_SETTINGS:
    TAGS = get_api_tags_metadata()
    """
    return [
        {"name": tag, "description": description}
        for tag, description in TAG_DESCRIPTIONS.items()
    ]


# Common examples used across multiple endpoints
COMMON_EXAMPLES = {
    'permission_error': OpenApiExample(
        name="Policy Denied",
        description="The privacy policy does not allow this action",
        response_only=True,
        status_codes=['403'],
        value={
            "type": "about:blank",
            "title": "Forbidden",
            "status": 403,
            "detail": "This user has disabled messages."
        }
    ),
    'rate_limit_error': OpenApiExample(
        name="Rate Limit Error",
        description="Action rate limit exceeded",
        response_only=True,
        status_codes=['429'],
        value={
            "type": "about:blank",
            "title": "Too Many Requests",
            "status": 429,
            "detail": "Please wait 5 seconds before trying again.",
            "retry_after": 5
        }
    ),
}


def profile_schema(**kwargs):
    """Schema decorator for user profile endpoints."""
    defaults = {
        'tags': [APITags.USER_PROFILES],
        'examples': [COMMON_EXAMPLES['permission_error']],
    }
    defaults.update(kwargs)
    return extend_schema(**defaults)


def rate_limited_schema(tag, **kwargs):
    """Schema decorator for endpoints guarded by the action rate limiter."""
    defaults = {
        'tags': [tag],
        'examples': [
            COMMON_EXAMPLES['permission_error'],
            COMMON_EXAMPLES['rate_limit_error'],
        ],
    }
    defaults.update(kwargs)
    return extend_schema(**defaults)
