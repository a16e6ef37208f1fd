"""
Direct message service.

Sending runs four gates in order: blocks, the recipient's message privacy,
the content screen, then the sender's ``send_message`` rate limit.
"""

from django.utils import timezone
from rest_framework.exceptions import NotFound
import structlog

from connections.models import BlockedUser
from core.exceptions import PolicyDenied
from core.rate_limiter import rate_limiter_for_user
from privacy.policy import can_send_message

from ..models import DirectMessage
from .content_filter import screen_message

logger = structlog.get_logger(__name__)

BLOCKED_REASON = "You cannot message this user."


class MessageService:
    """Send, list and read direct messages."""

    @staticmethod
    def send_message(sender, recipient, content, confirm_flagged=False):
        if BlockedUser.exists_between(sender, recipient):
            logger.info(
                "Message blocked",
                sender_id=str(sender.pk),
                recipient_id=str(recipient.pk),
            )
            raise PolicyDenied(BLOCKED_REASON)

        decision = can_send_message(recipient.pk, sender.pk)
        if not decision:
            logger.info(
                "Message denied by recipient privacy",
                sender_id=str(sender.pk),
                recipient_id=str(recipient.pk),
                reason=decision.reason,
            )
            raise PolicyDenied(decision.reason)

        flag = screen_message(content, confirmed=confirm_flagged)

        limiter = rate_limiter_for_user(sender)
        limiter.require('send_message')

        message = DirectMessage.objects.create(
            sender=sender,
            recipient=recipient,
            content=content,
        )
        limiter.record_attempt('send_message')

        logger.info(
            "Message sent",
            message_id=str(message.pk),
            sender_id=str(sender.pk),
            recipient_id=str(recipient.pk),
            flag_reasons=flag.reasons,
        )
        return message

    @staticmethod
    def conversation(user, other):
        """Messages exchanged between ``user`` and ``other``, oldest first."""
        return (
            DirectMessage.objects
            .between(user, other)
            .select_related('sender', 'recipient', 'sender__profile', 'recipient__profile')
            .order_by('created_at')
        )

    @staticmethod
    def conversations(user):
        """
        One entry per conversation partner, most recent first.

        Each entry is a dict with the partner, the latest message and the
        number of unread messages ``user`` has from that partner.
        """
        messages = (
            DirectMessage.objects
            .involving(user)
            .select_related('sender', 'recipient', 'sender__profile', 'recipient__profile')
            .order_by('-created_at')
        )

        unread = {}
        for sender_id in DirectMessage.objects.unread_for(user).values_list('sender_id', flat=True):
            unread[sender_id] = unread.get(sender_id, 0) + 1

        conversations = []
        seen = set()
        for message in messages:
            partner = message.recipient if message.sender_id == user.pk else message.sender
            if partner.pk in seen:
                continue
            seen.add(partner.pk)
            conversations.append({
                'user': partner,
                'last_message': message,
                'unread_count': unread.get(partner.pk, 0),
            })
        return conversations

    @staticmethod
    def mark_read(user, message_id):
        """Mark a received message as read. Only the recipient can do this."""
        try:
            message = DirectMessage.objects.get(pk=message_id, recipient=user)
        except DirectMessage.DoesNotExist:
            raise NotFound("Message not found.")

        message.mark_read()
        return message

    @staticmethod
    def mark_conversation_read(user, other):
        return DirectMessage.objects.unread_for(user).filter(sender=other).update(
            is_read=True, read_at=timezone.now())
