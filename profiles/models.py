"""
Profiles app models.

A profile holds everything about a user that other people may see (display
name, bio, avatar, church) together with the two privacy switches the
visibility policy reads: ``profile_visibility`` and ``message_privacy``.
"""

import secrets
import uuid
from django.db import models
from django.conf import settings
from django.utils.text import slugify
from django.utils.translation import gettext_lazy as _

# Avoids characters that are easy to confuse when read aloud (0/O, 1/I/l)
INVITE_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZabcdefghjkmnpqrstuvwxyz23456789'


def generate_invite_code(length=8):
    return ''.join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


class Church(models.Model):
    """
    A church community. Members of the same church can see each other's
    ``my_church`` testimonies and private profiles.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(_('name'), max_length=120)
    slug = models.SlugField(_('slug'), max_length=140, unique=True)
    city = models.CharField(_('city'), max_length=100, blank=True)
    denomination = models.CharField(_('denomination'), max_length=100, blank=True)
    invite_code = models.CharField(
        _('invite code'),
        max_length=8,
        unique=True,
        default=generate_invite_code,
        help_text=_('Shared with members so they can join')
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='churches_created'
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)

    class Meta:
        db_table = 'profiles_church'
        verbose_name = _('Church')
        verbose_name_plural = _('Churches')
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = f"{slugify(self.name)[:130]}-{str(self.id)[:8]}"
        super().save(*args, **kwargs)


class UserProfile(models.Model):
    """
    Public-facing profile and privacy settings, one per user.
    """

    VISIBILITY_PUBLIC = 'public'
    VISIBILITY_PRIVATE = 'private'
    VISIBILITY_CHOICES = [
        (VISIBILITY_PUBLIC, _('Public')),
        (VISIBILITY_PRIVATE, _('Private')),
    ]

    MESSAGES_EVERYONE = 'everyone'
    MESSAGES_FRIENDS = 'friends'
    MESSAGES_NONE = 'none'
    MESSAGE_PRIVACY_CHOICES = [
        (MESSAGES_EVERYONE, _('Everyone')),
        (MESSAGES_FRIENDS, _('Friends and church members')),
        (MESSAGES_NONE, _('Nobody')),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='profile'
    )

    display_name = models.CharField(
        _('display name'),
        max_length=50,
        blank=True,
        help_text=_('Optional public name shown to other users')
    )
    bio = models.TextField(
        _('bio'),
        max_length=500,
        blank=True,
    )
    avatar_url = models.URLField(_('avatar URL'), blank=True)
    location = models.CharField(_('location'), max_length=100, blank=True)

    church = models.ForeignKey(
        Church,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='members'
    )

    profile_visibility = models.CharField(
        _('profile visibility'),
        max_length=20,
        choices=VISIBILITY_CHOICES,
        default=VISIBILITY_PUBLIC
    )
    message_privacy = models.CharField(
        _('message privacy'),
        max_length=20,
        choices=MESSAGE_PRIVACY_CHOICES,
        default=MESSAGES_EVERYONE,
        help_text=_('Who may start a direct message with this user')
    )

    # Timestamps
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        db_table = 'profiles_user_profile'
        verbose_name = _('User Profile')
        verbose_name_plural = _('User Profiles')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['church']),
            models.Index(fields=['profile_visibility']),
        ]

    def __str__(self):
        return f"Profile for {self.user.email}"

    @property
    def display_name_or_username(self):
        """Return display name or fall back to username."""
        return self.display_name or self.user.username

    @property
    def is_private(self):
        return self.profile_visibility == self.VISIBILITY_PRIVATE
