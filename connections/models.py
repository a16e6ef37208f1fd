"""
Connection models: friendships, followers and blocked users.

A friendship is a single requester -> addressee row. Once accepted it is
undirected, so every lookup checks both orderings of the pair. Follows are
directed and need no approval.
"""

import uuid
from django.db import models
from django.db.models import Q
from django.conf import settings
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class FriendshipQuerySet(models.QuerySet):

    def between(self, user_a, user_b):
        """Rows for the pair in either direction."""
        return self.filter(
            Q(requester=user_a, addressee=user_b) |
            Q(requester=user_b, addressee=user_a)
        )

    def involving(self, user):
        return self.filter(Q(requester=user) | Q(addressee=user))

    def accepted(self):
        return self.filter(status=Friendship.STATUS_ACCEPTED)

    def pending(self):
        return self.filter(status=Friendship.STATUS_PENDING)


class Friendship(models.Model):
    """
    Friend request between two users, accepted friendships included.
    """

    STATUS_PENDING = 'pending'
    STATUS_ACCEPTED = 'accepted'
    STATUS_DECLINED = 'declined'
    STATUS_CHOICES = [
        (STATUS_PENDING, _('Pending')),
        (STATUS_ACCEPTED, _('Accepted')),
        (STATUS_DECLINED, _('Declined')),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='friend_requests_sent'
    )
    addressee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='friend_requests_received'
    )
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    responded_at = models.DateTimeField(_('responded at'), null=True, blank=True)

    objects = FriendshipQuerySet.as_manager()

    class Meta:
        db_table = 'connections_friendship'
        verbose_name = _('Friendship')
        verbose_name_plural = _('Friendships')
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['requester', 'addressee'],
                name='unique_friendship_pair'
            ),
            models.CheckConstraint(
                condition=~Q(requester=models.F('addressee')),
                name='friendship_not_self'
            ),
        ]
        indexes = [
            models.Index(fields=['addressee', 'status']),
            models.Index(fields=['requester', 'status']),
        ]

    def __str__(self):
        return f"{self.requester} -> {self.addressee} ({self.status})"

    def other_user(self, user):
        return self.addressee if self.requester_id == user.pk else self.requester

    def accept(self):
        self.status = self.STATUS_ACCEPTED
        self.responded_at = timezone.now()
        self.save(update_fields=['status', 'responded_at'])

    def decline(self):
        self.status = self.STATUS_DECLINED
        self.responded_at = timezone.now()
        self.save(update_fields=['status', 'responded_at'])


class Follow(models.Model):
    """
    One user following another. Only public profiles can be followed.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    follower = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='following_set'
    )
    following = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='follower_set'
    )
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)

    class Meta:
        db_table = 'connections_follow'
        verbose_name = _('Follow')
        verbose_name_plural = _('Follows')
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['follower', 'following'],
                name='unique_follow'
            ),
            models.CheckConstraint(
                condition=~Q(follower=models.F('following')),
                name='follow_not_self'
            ),
        ]

    def __str__(self):
        return f"{self.follower} follows {self.following}"


class BlockedUser(models.Model):
    """
    A block placed by one user on another. Blocked users cannot message the
    blocker.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    blocker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='blocks_made'
    )
    blocked = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='blocks_received'
    )
    reason = models.CharField(_('reason'), max_length=255, blank=True)
    blocked_at = models.DateTimeField(_('blocked at'), auto_now_add=True)

    class Meta:
        db_table = 'connections_blocked_user'
        verbose_name = _('Blocked User')
        verbose_name_plural = _('Blocked Users')
        ordering = ['-blocked_at']
        constraints = [
            models.UniqueConstraint(
                fields=['blocker', 'blocked'],
                name='unique_block'
            ),
        ]

    def __str__(self):
        return f"{self.blocker} blocked {self.blocked}"

    @classmethod
    def exists_between(cls, user_a, user_b):
        """True if either user has blocked the other."""
        return cls.objects.filter(
            Q(blocker=user_a, blocked=user_b) |
            Q(blocker=user_b, blocked=user_a)
        ).exists()
