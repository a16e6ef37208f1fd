"""
Testimony models.

Each user may publish one testimony. Its ``visibility`` picks one of three
nested audiences:

    my_church     members of the owner's church
    all_churches  church members, friends and followers
    shareable     anyone, including signed-out visitors
"""

import uuid
from django.conf import settings
from django.core.validators import MinLengthValidator
from django.db import models
from django.db.models import Exists, OuterRef, Q
from django.utils.translation import gettext_lazy as _

from connections.models import Follow, Friendship
from profiles.models import UserProfile


class TestimonyQuerySet(models.QuerySet):

    def visible_to(self, viewer):
        """
        Testimonies ``viewer`` may read.

        Mirrors ``privacy.policy.VisibilityPolicy.can_view_testimony`` as a
        single query so list endpoints don't evaluate rows one at a time.
        """
        if viewer is None or not viewer.is_authenticated:
            return self.filter(visibility=Testimony.VISIBILITY_SHAREABLE)

        viewer_church_id = (
            UserProfile.objects.filter(user=viewer)
            .values_list('church_id', flat=True)
            .first()
        )

        audience = Q(user=viewer) | Q(visibility=Testimony.VISIBILITY_SHAREABLE)

        if viewer_church_id is not None:
            audience |= Q(
                visibility__in=[Testimony.VISIBILITY_MY_CHURCH, Testimony.VISIBILITY_ALL_CHURCHES],
                user__profile__church_id=viewer_church_id,
            )

        is_friend = Friendship.objects.accepted().filter(
            Q(requester=viewer, addressee=OuterRef('user')) |
            Q(requester=OuterRef('user'), addressee=viewer)
        )
        follows_owner = Follow.objects.filter(follower=viewer, following=OuterRef('user'))

        audience |= Q(visibility=Testimony.VISIBILITY_ALL_CHURCHES) & (
            Exists(is_friend) | Exists(follows_owner)
        )

        return self.filter(audience)


class Testimony(models.Model):
    """
    A user's personal faith story.
    """

    VISIBILITY_MY_CHURCH = 'my_church'
    VISIBILITY_ALL_CHURCHES = 'all_churches'
    VISIBILITY_SHAREABLE = 'shareable'
    VISIBILITY_CHOICES = [
        (VISIBILITY_MY_CHURCH, _('My church')),
        (VISIBILITY_ALL_CHURCHES, _('All churches')),
        (VISIBILITY_SHAREABLE, _('Shareable')),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='testimony',
        help_text=_('User who shared this testimony')
    )

    title = models.CharField(
        max_length=200,
        default='My Testimony',
        help_text=_('Testimony title')
    )
    content = models.TextField(
        max_length=10000,
        validators=[MinLengthValidator(20)],
        help_text=_('Full testimony')
    )
    lesson = models.TextField(
        max_length=2000,
        blank=True,
        help_text=_('What God taught you through it')
    )
    word_count = models.PositiveIntegerField(default=0)

    visibility = models.CharField(
        _('visibility'),
        max_length=20,
        choices=VISIBILITY_CHOICES,
        default=VISIBILITY_ALL_CHURCHES
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TestimonyQuerySet.as_manager()

    class Meta:
        db_table = 'testimonies_testimony'
        verbose_name = _('Testimony')
        verbose_name_plural = _('Testimonies')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['visibility', '-created_at']),
        ]

    def __str__(self):
        return f"{self.title} ({self.user})"

    def save(self, *args, **kwargs):
        self.word_count = len(self.content.split())
        if 'update_fields' in kwargs and kwargs['update_fields'] is not None:
            kwargs['update_fields'] = set(kwargs['update_fields']) | {'word_count'}
        super().save(*args, **kwargs)


class TestimonyView(models.Model):
    """
    A viewer having opened a testimony. Counted once per viewer.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    testimony = models.ForeignKey(
        Testimony,
        on_delete=models.CASCADE,
        related_name='views'
    )
    viewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='testimony_views'
    )
    viewed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'testimonies_view'
        constraints = [
            models.UniqueConstraint(
                fields=['testimony', 'viewer'],
                name='unique_testimony_view'
            ),
        ]


class TestimonyLike(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    testimony = models.ForeignKey(
        Testimony,
        on_delete=models.CASCADE,
        related_name='likes'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='testimony_likes'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'testimonies_like'
        constraints = [
            models.UniqueConstraint(
                fields=['testimony', 'user'],
                name='unique_testimony_like'
            ),
        ]


class TestimonyComment(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    testimony = models.ForeignKey(
        Testimony,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='testimony_comments'
    )
    content = models.TextField(max_length=1000)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'testimonies_comment'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['testimony', 'created_at']),
        ]

    def __str__(self):
        return f"Comment by {self.author} on {self.testimony_id}"
