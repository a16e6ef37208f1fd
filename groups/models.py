"""
Group models for Lightning.

A group is public (anyone may find and join it) or private (found only by
its members, joined through a leader-approved request). Memberships carry
a role and a status; only ``active`` members read or post messages.
"""

import uuid
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Group(models.Model):
    """
    Fellowship group with its own chat.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(_('group name'), max_length=100)
    description = models.TextField(_('description'), blank=True)
    avatar_emoji = models.CharField(_('avatar emoji'), max_length=8, default='✝️')

    is_private = models.BooleanField(
        _('private'),
        default=False,
        help_text=_('Private groups are hidden from search and need leader approval to join')
    )

    member_limit = models.PositiveIntegerField(
        _('member limit'),
        validators=[MinValueValidator(2), MaxValueValidator(100)],
        default=50,
        help_text=_('Maximum number of active members')
    )

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='created_groups',
        verbose_name=_('created by')
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Group')
        verbose_name_plural = _('Groups')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_private', 'created_at']),
        ]

    def __str__(self):
        return self.name


class GroupMembership(models.Model):

    ROLE_LEADER = 'leader'
    ROLE_MEMBER = 'member'
    ROLE_CHOICES = [
        (ROLE_LEADER, _('Leader')),
        (ROLE_MEMBER, _('Member')),
    ]

    STATUS_PENDING = 'pending'
    STATUS_ACTIVE = 'active'
    STATUS_CHOICES = [
        (STATUS_PENDING, _('Pending Approval')),
        (STATUS_ACTIVE, _('Active')),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        related_name='memberships',
        verbose_name=_('group')
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='group_memberships',
        verbose_name=_('member')
    )
    role = models.CharField(_('role'), max_length=20, choices=ROLE_CHOICES, default=ROLE_MEMBER)
    status = models.CharField(_('status'), max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    joined_at = models.DateTimeField(_('joined at'), default=timezone.now)

    class Meta:
        verbose_name = _('Group Membership')
        verbose_name_plural = _('Group Memberships')
        unique_together = ['group', 'user']
        ordering = ['joined_at']
        indexes = [
            models.Index(fields=['group', 'status']),
            models.Index(fields=['user', 'status']),
        ]

    def __str__(self):
        return f"{self.user} in {self.group.name}"

    @property
    def is_leader(self):
        return self.role == self.ROLE_LEADER


class GroupMessage(models.Model):
    """
    A message posted to a group's chat.

    ``flag_reasons`` keeps what the content screen found on low and confirmed
    medium severity messages so leaders can review them.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='group_messages'
    )
    content = models.TextField(max_length=2000)
    is_flagged = models.BooleanField(default=False)
    flag_reasons = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['group', 'created_at']),
        ]

    def __str__(self):
        return f"{self.sender} in {self.group.name}"
