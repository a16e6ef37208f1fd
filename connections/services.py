"""
Connections business logic: friend requests, follows and blocks.
"""

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError
import structlog

from core.exceptions import ConflictError, PolicyDenied
from core.rate_limiter import rate_limiter_for_user
from profiles.models import UserProfile

from .models import BlockedUser, Follow, Friendship

logger = structlog.get_logger(__name__)
User = get_user_model()


class FriendshipService:
    """
    Service for friend requests and friendships.
    """

    @staticmethod
    def friend_ids(user):
        """Ids of everyone with an accepted friendship with ``user``."""
        pairs = Friendship.objects.accepted().involving(user).values_list(
            'requester_id', 'addressee_id')
        return {a if b == user.pk else b for a, b in pairs}

    @staticmethod
    def friends_of(user):
        return User.objects.filter(id__in=FriendshipService.friend_ids(user)).order_by('username')

    @staticmethod
    def mutual_friends(user, other):
        mutual = FriendshipService.friend_ids(user) & FriendshipService.friend_ids(other)
        return User.objects.filter(id__in=mutual).order_by('username')

    @staticmethod
    def incoming_requests(user):
        return Friendship.objects.pending().filter(addressee=user).select_related('requester')

    @staticmethod
    def sent_requests(user):
        return Friendship.objects.pending().filter(requester=user).select_related('addressee')

    @staticmethod
    @transaction.atomic
    def send_request(user, target):
        """
        Send a friend request from ``user`` to ``target``.

        If ``target`` already asked ``user``, their request is accepted
        instead. A declined request can be sent again.
        """
        if user.pk == target.pk:
            raise ValidationError({'user_id': "You cannot send a friend request to yourself."})

        if BlockedUser.exists_between(user, target):
            raise PolicyDenied("You cannot send a friend request to this user.")

        existing = Friendship.objects.select_for_update().between(user, target).first()

        if existing is not None and existing.status == Friendship.STATUS_ACCEPTED:
            raise ConflictError("You are already friends.")

        if existing is not None and existing.status == Friendship.STATUS_PENDING:
            if existing.requester_id == user.pk:
                raise ConflictError("Friend request already sent.")
            existing.accept()
            logger.info(
                "Friend request accepted by counter-request",
                user_id=str(user.pk),
                friend_id=str(target.pk),
            )
            return existing

        limiter = rate_limiter_for_user(user)
        limiter.require('send_friend_request')

        if existing is not None:
            existing.requester = user
            existing.addressee = target
            existing.status = Friendship.STATUS_PENDING
            existing.responded_at = None
            existing.save(update_fields=['requester', 'addressee', 'status', 'responded_at'])
            friendship = existing
        else:
            friendship = Friendship.objects.create(requester=user, addressee=target)

        limiter.record_attempt('send_friend_request')

        logger.info(
            "Friend request sent",
            user_id=str(user.pk),
            target_id=str(target.pk),
            request_id=str(friendship.pk),
        )
        return friendship

    @staticmethod
    def _pending_for_addressee(user, request_id):
        try:
            return Friendship.objects.pending().get(pk=request_id, addressee=user)
        except Friendship.DoesNotExist:
            raise NotFound("Friend request not found.")

    @staticmethod
    def accept_request(user, request_id):
        friendship = FriendshipService._pending_for_addressee(user, request_id)
        friendship.accept()
        logger.info(
            "Friend request accepted",
            user_id=str(user.pk),
            request_id=str(friendship.pk),
        )
        return friendship

    @staticmethod
    def decline_request(user, request_id):
        friendship = FriendshipService._pending_for_addressee(user, request_id)
        friendship.decline()
        logger.info(
            "Friend request declined",
            user_id=str(user.pk),
            request_id=str(friendship.pk),
        )
        return friendship

    @staticmethod
    def remove_friend(user, other):
        deleted, _ = Friendship.objects.accepted().between(user, other).delete()
        if not deleted:
            raise NotFound("You are not friends with this user.")

        logger.info("Friend removed", user_id=str(user.pk), friend_id=str(other.pk))


class FollowService:
    """
    Service for following public profiles.
    """

    @staticmethod
    def follow(user, target):
        """
        Follow ``target``. Following twice is a no-op.

        Returns (follow, created).
        """
        if user.pk == target.pk:
            raise ValidationError({'user_id': "You cannot follow yourself."})

        visibility = (
            UserProfile.objects.filter(user=target)
            .values_list('profile_visibility', flat=True)
            .first()
        )
        if visibility != UserProfile.VISIBILITY_PUBLIC:
            raise PolicyDenied("This user has a private profile.")

        follow, created = Follow.objects.get_or_create(follower=user, following=target)
        if created:
            logger.info("User followed", user_id=str(user.pk), following_id=str(target.pk))
        return follow, created

    @staticmethod
    def unfollow(user, target):
        deleted, _ = Follow.objects.filter(follower=user, following=target).delete()
        if deleted:
            logger.info("User unfollowed", user_id=str(user.pk), following_id=str(target.pk))
        return bool(deleted)

    @staticmethod
    def followers_of(user):
        return User.objects.filter(following_set__following=user).order_by('username')

    @staticmethod
    def following_of(user):
        return User.objects.filter(follower_set__follower=user).order_by('username')

    @staticmethod
    def counts(user):
        return {
            'followers': Follow.objects.filter(following=user).count(),
            'following': Follow.objects.filter(follower=user).count(),
        }


class BlockService:
    """
    Service for blocking users.
    """

    @staticmethod
    def block(user, target, reason=''):
        if user.pk == target.pk:
            raise ValidationError({'user_id': "You cannot block yourself."})

        block, created = BlockedUser.objects.get_or_create(
            blocker=user,
            blocked=target,
            defaults={'reason': reason or ''},
        )
        if created:
            logger.info("User blocked", user_id=str(user.pk), blocked_id=str(target.pk))
        return block

    @staticmethod
    def unblock(user, target):
        deleted, _ = BlockedUser.objects.filter(blocker=user, blocked=target).delete()
        if not deleted:
            raise NotFound("This user is not blocked.")

        logger.info("User unblocked", user_id=str(user.pk), blocked_id=str(target.pk))

    @staticmethod
    def blocked_by(user):
        return BlockedUser.objects.filter(blocker=user).select_related('blocked')

    @staticmethod
    def is_blocked(user_a, user_b):
        return BlockedUser.exists_between(user_a, user_b)
