"""
Visibility and permission policy.

Three questions decide what users see of each other:

- ``can_view_testimony(owner_id, viewer_id)``
- ``can_send_message(recipient_id, sender_id)``
- ``is_user_visible(user_id, viewer_id)``

Each returns a ``PolicyDecision``. Every path that cannot positively prove
access denies it, including lookup failures and unrecognised settings.
Owners can always see their own things.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from profiles.models import UserProfile
from testimonies.models import Testimony

from .lookups import OrmRelationshipLookup, RelationshipLookup, RelationshipLookupError

logger = structlog.get_logger(__name__)

CANNOT_MESSAGE_SELF = "You cannot message yourself."
CANNOT_VERIFY = "Unable to verify permissions."
FRIENDS_ONLY = "This user only accepts messages from friends and church members."
MESSAGES_DISABLED = "This user has disabled messages."
PROFILE_PRIVATE = "This profile is private."
TESTIMONY_HIDDEN = "You do not have permission to view this testimony."


@dataclass(frozen=True)
class PolicyDecision:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self):
        return self.allowed


ALLOW = PolicyDecision(True)


def _key(user_id):
    """Normalise an id for comparison; empty ids mean nobody."""
    if user_id is None or user_id == '':
        return None
    return str(user_id)


def _same_church(a, b):
    return a is not None and b is not None and a.church_id is not None and a.church_id == b.church_id


class VisibilityPolicy:
    """
    Evaluates the visibility rules against a ``RelationshipLookup``.
    """

    def __init__(self, lookup: RelationshipLookup = None):
        self.lookup = lookup or OrmRelationshipLookup()

    def can_view_testimony(self, owner_id, viewer_id) -> PolicyDecision:
        owner_id, viewer_id = _key(owner_id), _key(viewer_id)
        denied = PolicyDecision(False, TESTIMONY_HIDDEN)

        if owner_id is None:
            return denied
        if owner_id == viewer_id:
            return ALLOW

        try:
            visibility = self.lookup.get_testimony_visibility(owner_id)
            if visibility is None:
                return denied

            if visibility == Testimony.VISIBILITY_SHAREABLE:
                return ALLOW

            if viewer_id is None:
                return denied

            if visibility not in (Testimony.VISIBILITY_MY_CHURCH, Testimony.VISIBILITY_ALL_CHURCHES):
                logger.warning(
                    "Unknown testimony visibility",
                    owner_id=owner_id,
                    visibility=visibility,
                )
                return denied

            owner = self.lookup.get_user(owner_id)
            viewer = self.lookup.get_user(viewer_id)
            if _same_church(owner, viewer):
                return ALLOW

            if visibility == Testimony.VISIBILITY_MY_CHURCH:
                return denied

            if self.lookup.are_friends(owner_id, viewer_id):
                return ALLOW
            if self.lookup.is_following(viewer_id, owner_id):
                return ALLOW
            return denied

        except RelationshipLookupError as exc:
            logger.error(
                "Testimony visibility lookup failed",
                owner_id=owner_id,
                viewer_id=viewer_id,
                error=str(exc),
            )
            return denied

    def can_send_message(self, recipient_id, sender_id) -> PolicyDecision:
        recipient_id, sender_id = _key(recipient_id), _key(sender_id)

        if sender_id is None:
            return PolicyDecision(False, CANNOT_VERIFY)
        if recipient_id == sender_id:
            return PolicyDecision(False, CANNOT_MESSAGE_SELF)
        if recipient_id is None:
            return PolicyDecision(False, CANNOT_VERIFY)

        try:
            recipient = self.lookup.get_user(recipient_id)
            if recipient is None:
                return PolicyDecision(False, CANNOT_VERIFY)

            privacy = recipient.message_privacy

            if privacy == UserProfile.MESSAGES_EVERYONE:
                return ALLOW

            if privacy == UserProfile.MESSAGES_FRIENDS:
                if self.lookup.are_friends(recipient_id, sender_id):
                    return ALLOW
                if _same_church(recipient, self.lookup.get_user(sender_id)):
                    return ALLOW
                return PolicyDecision(False, FRIENDS_ONLY)

            if privacy == UserProfile.MESSAGES_NONE:
                return PolicyDecision(False, MESSAGES_DISABLED)

            logger.warning(
                "Unknown message privacy setting",
                recipient_id=recipient_id,
                message_privacy=privacy,
            )
            return PolicyDecision(False, CANNOT_VERIFY)

        except RelationshipLookupError as exc:
            logger.error(
                "Message permission lookup failed",
                recipient_id=recipient_id,
                sender_id=sender_id,
                error=str(exc),
            )
            return PolicyDecision(False, CANNOT_VERIFY)

    def is_user_visible(self, user_id, viewer_id) -> PolicyDecision:
        user_id, viewer_id = _key(user_id), _key(viewer_id)
        denied = PolicyDecision(False, PROFILE_PRIVATE)

        if user_id is None:
            return denied
        if user_id == viewer_id:
            return ALLOW

        try:
            user = self.lookup.get_user(user_id)
            if user is None:
                return denied

            if user.profile_visibility == UserProfile.VISIBILITY_PUBLIC:
                return ALLOW

            if viewer_id is None or user.profile_visibility != UserProfile.VISIBILITY_PRIVATE:
                return denied

            if _same_church(user, self.lookup.get_user(viewer_id)):
                return ALLOW
            if self.lookup.are_friends(user_id, viewer_id):
                return ALLOW
            return denied

        except RelationshipLookupError as exc:
            logger.error(
                "Profile visibility lookup failed",
                user_id=user_id,
                viewer_id=viewer_id,
                error=str(exc),
            )
            return denied


def can_view_testimony(owner_id, viewer_id) -> PolicyDecision:
    return VisibilityPolicy().can_view_testimony(owner_id, viewer_id)


def can_send_message(recipient_id, sender_id) -> PolicyDecision:
    return VisibilityPolicy().can_send_message(recipient_id, sender_id)


def is_user_visible(user_id, viewer_id) -> PolicyDecision:
    return VisibilityPolicy().is_user_visible(user_id, viewer_id)
