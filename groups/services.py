"""
Group business logic.

Public groups are listed and searchable by everyone; private groups are
visible to their active members only. Leaders approve join requests,
promote members and review flagged chat messages.
"""

from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from rest_framework.exceptions import NotFound, ValidationError
import structlog

from core.exceptions import ConflictError, PolicyDenied
from core.rate_limiter import rate_limiter_for_user
from messaging.services import screen_message

from .models import Group, GroupMembership, GroupMessage

logger = structlog.get_logger(__name__)

SEARCH_LIMIT = 50


class GroupService:
    """
    Service for groups, their membership and their chat.
    """

    EDITABLE_FIELDS = ('name', 'description', 'avatar_emoji', 'is_private', 'member_limit')

    @staticmethod
    def annotated(queryset=None):
        queryset = Group.objects.all() if queryset is None else queryset
        return queryset.select_related('creator').annotate(
            member_count=Count(
                'memberships',
                filter=Q(memberships__status=GroupMembership.STATUS_ACTIVE),
                distinct=True,
            ),
        )

    @staticmethod
    def visible_to(user):
        member_of = GroupMembership.objects.filter(
            user=user, status=GroupMembership.STATUS_ACTIVE
        ).values('group_id')
        return GroupService.annotated(
            Group.objects.filter(Q(is_private=False) | Q(pk__in=member_of))
        )

    @staticmethod
    def user_groups(user):
        """Groups ``user`` is an active member of."""
        member_of = GroupMembership.objects.filter(
            user=user, status=GroupMembership.STATUS_ACTIVE
        ).values('group_id')
        return GroupService.annotated(Group.objects.filter(pk__in=member_of))

    @staticmethod
    def search(query):
        """Public groups whose name or description contains ``query``."""
        groups = Group.objects.filter(is_private=False)
        query = (query or '').strip()
        if query:
            groups = groups.filter(Q(name__icontains=query) | Q(description__icontains=query))
        return GroupService.annotated(groups)[:SEARCH_LIMIT]

    @staticmethod
    def _get(group_id):
        try:
            return Group.objects.get(pk=group_id)
        except Group.DoesNotExist:
            raise NotFound("Group not found.")

    @staticmethod
    def membership(user, group):
        return GroupMembership.objects.filter(group=group, user=user).first()

    @staticmethod
    def get_visible(group_id, user):
        """
        Fetch a group ``user`` may see. Private groups look missing to
        anyone who is not an active member.
        """
        try:
            return GroupService.visible_to(user).get(pk=group_id)
        except Group.DoesNotExist:
            raise NotFound("Group not found.")

    @staticmethod
    def _require_member(user, group):
        membership = GroupService.membership(user, group)
        if membership is None or membership.status != GroupMembership.STATUS_ACTIVE:
            raise PolicyDenied("Only group members can do that.")
        return membership

    @staticmethod
    def _require_leader(user, group):
        membership = GroupService._require_member(user, group)
        if not membership.is_leader:
            raise PolicyDenied("Only group leaders can do that.")
        return membership

    @staticmethod
    def _active_count(group):
        return group.memberships.filter(status=GroupMembership.STATUS_ACTIVE).count()

    @staticmethod
    def create_group(user, data):
        """
        Create a group with ``user`` as its first leader.
        """
        limiter = rate_limiter_for_user(user)
        limiter.require('create_group')

        with transaction.atomic():
            group = Group.objects.create(creator=user, **data)
            GroupMembership.objects.create(
                group=group,
                user=user,
                role=GroupMembership.ROLE_LEADER,
                status=GroupMembership.STATUS_ACTIVE,
            )

        limiter.record_attempt('create_group')

        logger.info(
            "Group created",
            user_id=str(user.pk),
            group_id=str(group.pk),
            is_private=group.is_private,
        )
        return group

    @staticmethod
    def update_group(user, group_id, data):
        group = GroupService._get(group_id)
        GroupService._require_leader(user, group)

        if 'member_limit' in data and data['member_limit'] < GroupService._active_count(group):
            raise ValidationError({'member_limit': ["The group already has more members than that."]})

        changed = [f for f in GroupService.EDITABLE_FIELDS
                   if f in data and getattr(group, f) != data[f]]
        for field in changed:
            setattr(group, field, data[field])

        if changed:
            group.save(update_fields=changed + ['updated_at'])
            logger.info(
                "Group updated",
                user_id=str(user.pk),
                group_id=str(group.pk),
                changes=changed,
            )
        return group

    @staticmethod
    def delete_group(user, group_id):
        group = GroupService._get(group_id)
        GroupService._require_leader(user, group)
        group.delete()
        logger.info("Group deleted", user_id=str(user.pk), group_id=str(group_id))

    @staticmethod
    def join(user, group_id):
        """
        Join a public group, or ask to join a private one.

        Returns the membership; its status is ``active`` or ``pending``.
        """
        group = GroupService._get(group_id)

        existing = GroupService.membership(user, group)
        if existing is not None:
            if existing.status == GroupMembership.STATUS_PENDING:
                raise ConflictError("Your request to join this group is pending.")
            raise ConflictError("You are already a member of this group.")

        if GroupService._active_count(group) >= group.member_limit:
            raise ValidationError("This group is full.")

        status = GroupMembership.STATUS_PENDING if group.is_private else GroupMembership.STATUS_ACTIVE
        try:
            with transaction.atomic():
                membership = GroupMembership.objects.create(group=group, user=user, status=status)
        except IntegrityError:
            raise ConflictError("You are already a member of this group.")

        logger.info(
            "Group join",
            user_id=str(user.pk),
            group_id=str(group.pk),
            status=status,
        )
        return membership

    @staticmethod
    def leave(user, group_id):
        group = GroupService._get(group_id)
        membership = GroupService.membership(user, group)
        if membership is None:
            raise ValidationError("You are not a member of this group.")

        if membership.is_leader and membership.status == GroupMembership.STATUS_ACTIVE:
            other_leaders = group.memberships.filter(
                role=GroupMembership.ROLE_LEADER, status=GroupMembership.STATUS_ACTIVE
            ).exclude(pk=membership.pk)
            if not other_leaders.exists() and GroupService._active_count(group) > 1:
                raise ValidationError(
                    "Promote another member to leader before leaving, or delete the group.")

        membership.delete()
        logger.info("Group left", user_id=str(user.pk), group_id=str(group.pk))

    @staticmethod
    def members(user, group_id):
        group = GroupService.get_visible(group_id, user)
        return (
            group.memberships
            .filter(status=GroupMembership.STATUS_ACTIVE)
            .select_related('user', 'user__profile')
            .order_by('role', 'joined_at')
        )

    @staticmethod
    def pending_requests(user, group_id):
        group = GroupService._get(group_id)
        GroupService._require_leader(user, group)
        return (
            group.memberships
            .filter(status=GroupMembership.STATUS_PENDING)
            .select_related('user', 'user__profile')
        )

    @staticmethod
    def _pending(group, membership_id):
        try:
            return group.memberships.get(pk=membership_id, status=GroupMembership.STATUS_PENDING)
        except GroupMembership.DoesNotExist:
            raise NotFound("Join request not found.")

    @staticmethod
    def approve_request(user, group_id, membership_id):
        group = GroupService._get(group_id)
        GroupService._require_leader(user, group)
        membership = GroupService._pending(group, membership_id)

        if GroupService._active_count(group) >= group.member_limit:
            raise ValidationError("This group is full.")

        membership.status = GroupMembership.STATUS_ACTIVE
        membership.save(update_fields=['status'])
        logger.info(
            "Group join approved",
            user_id=str(user.pk),
            group_id=str(group.pk),
            member_id=str(membership.user_id),
        )
        return membership

    @staticmethod
    def deny_request(user, group_id, membership_id):
        group = GroupService._get(group_id)
        GroupService._require_leader(user, group)
        membership = GroupService._pending(group, membership_id)
        membership.delete()
        logger.info(
            "Group join denied",
            user_id=str(user.pk),
            group_id=str(group.pk),
            member_id=str(membership.user_id),
        )

    @staticmethod
    def promote(user, group_id, member_id):
        group = GroupService._get(group_id)
        GroupService._require_leader(user, group)
        try:
            membership = group.memberships.get(
                user_id=member_id, status=GroupMembership.STATUS_ACTIVE)
        except GroupMembership.DoesNotExist:
            raise NotFound("Member not found.")

        if not membership.is_leader:
            membership.role = GroupMembership.ROLE_LEADER
            membership.save(update_fields=['role'])
            logger.info(
                "Group member promoted",
                user_id=str(user.pk),
                group_id=str(group.pk),
                member_id=str(member_id),
            )
        return membership

    @staticmethod
    def messages(user, group_id):
        group = GroupService.get_visible(group_id, user)
        GroupService._require_member(user, group)
        return group.messages.select_related('sender', 'sender__profile').order_by('created_at')

    @staticmethod
    def send_message(user, group_id, content, confirm_flagged=False):
        """
        Post to a group's chat.

        Gates in order: active membership, the content screen, then the
        sender's ``send_group_message`` rate limit. Messages the screen
        flagged but let through are stored with their reasons.
        """
        group = GroupService.get_visible(group_id, user)
        GroupService._require_member(user, group)

        flag = screen_message(content, confirmed=confirm_flagged)

        limiter = rate_limiter_for_user(user)
        limiter.require('send_group_message')

        message = GroupMessage.objects.create(
            group=group,
            sender=user,
            content=content,
            is_flagged=flag.flagged,
            flag_reasons=flag.reasons,
        )
        limiter.record_attempt('send_group_message')

        logger.info(
            "Group message sent",
            message_id=str(message.pk),
            group_id=str(group.pk),
            sender_id=str(user.pk),
            flag_reasons=flag.reasons,
        )
        return message

    @staticmethod
    def flagged_messages(user, group_id):
        """Flagged chat messages, for leader review."""
        group = GroupService._get(group_id)
        GroupService._require_leader(user, group)
        return (
            group.messages.filter(is_flagged=True)
            .select_related('sender', 'sender__profile')
            .order_by('-created_at')
        )
