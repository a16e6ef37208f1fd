"""
Tests for direct message and content report services.
"""

from django.test import TestCase, override_settings
from rest_framework.exceptions import NotFound, ValidationError

from authentication.tests.factories import StaffUserFactory, UserFactory
from connections.tests.factories import AcceptedFriendshipFactory, BlockedUserFactory
from core.exceptions import ConflictError, PolicyDenied, RateLimitExceeded
from messaging.models import ContentReport, DirectMessage
from messaging.services import MessageService, ReportService
from profiles.models import UserProfile
from profiles.tests.factories import ChurchFactory, UserProfileFactory
from testimonies.models import Testimony
from testimonies.tests.factories import TestimonyFactory

from .factories import ContentReportFactory, DirectMessageFactory

NO_COOLDOWN = {'send_message': {'cooldown_ms': 0}}


@override_settings(LIGHTNING_RATE_LIMITS=NO_COOLDOWN)
class SendMessageTest(TestCase):
    """Test MessageService.send_message gates."""

    def setUp(self):
        self.sender = UserFactory()
        self.recipient = UserFactory()

    def test_send_to_open_recipient(self):
        message = MessageService.send_message(self.sender, self.recipient, 'Hello!')

        self.assertEqual(message.recipient, self.recipient)
        self.assertFalse(message.is_read)

    def test_cannot_message_self(self):
        with self.assertRaises(PolicyDenied) as ctx:
            MessageService.send_message(self.sender, self.sender, 'Hi me')

        self.assertEqual(str(ctx.exception.detail), 'You cannot message yourself.')

    def test_blocked_either_way(self):
        BlockedUserFactory(blocker=self.recipient, blocked=self.sender)

        with self.assertRaises(PolicyDenied):
            MessageService.send_message(self.sender, self.recipient, 'Hello?')
        with self.assertRaises(PolicyDenied):
            MessageService.send_message(self.recipient, self.sender, 'Hello?')
        self.assertFalse(DirectMessage.objects.exists())

    def test_messages_disabled(self):
        UserProfileFactory(user=self.recipient, message_privacy=UserProfile.MESSAGES_NONE)

        with self.assertRaises(PolicyDenied) as ctx:
            MessageService.send_message(self.sender, self.recipient, 'Hello')

        self.assertEqual(str(ctx.exception.detail), 'This user has disabled messages.')

    def test_friends_only_allows_friend_and_church_member(self):
        church = ChurchFactory()
        UserProfileFactory(user=self.recipient, church=church,
                           message_privacy=UserProfile.MESSAGES_FRIENDS)

        with self.assertRaises(PolicyDenied):
            MessageService.send_message(self.sender, self.recipient, 'Hello')

        AcceptedFriendshipFactory(requester=self.sender, addressee=self.recipient)
        MessageService.send_message(self.sender, self.recipient, 'Hello friend')

        member = UserFactory()
        UserProfileFactory(user=member, church=church)
        MessageService.send_message(member, self.recipient, 'Hello from church')

        self.assertEqual(DirectMessage.objects.count(), 2)

    def test_rate_limited_after_ten(self):
        for n in range(10):
            MessageService.send_message(self.sender, self.recipient, f'Message {n}')

        with self.assertRaises(RateLimitExceeded):
            MessageService.send_message(self.sender, self.recipient, 'One more')

    def test_denied_message_does_not_count_towards_limit(self):
        UserProfileFactory(user=self.recipient, message_privacy=UserProfile.MESSAGES_NONE)
        for _ in range(12):
            with self.assertRaises(PolicyDenied):
                MessageService.send_message(self.sender, self.recipient, 'Hello')

        MessageService.send_message(self.sender, UserFactory(), 'Still allowed')

    def test_clean_message_sent(self):
        message = MessageService.send_message(self.sender, self.recipient, 'See you Sunday')

        self.assertEqual(message.content, 'See you Sunday')

    def test_threatening_message_refused(self):
        with self.assertRaises(ValidationError) as ctx:
            MessageService.send_message(self.sender, self.recipient, "I'll kill you", confirm_flagged=True)

        self.assertIn('content', ctx.exception.detail)
        self.assertFalse(DirectMessage.objects.exists())

    def test_harassing_message_needs_confirmation(self):
        with self.assertRaises(ValidationError):
            MessageService.send_message(self.sender, self.recipient, "You're pathetic")
        self.assertFalse(DirectMessage.objects.exists())

        message = MessageService.send_message(
            self.sender, self.recipient, "You're pathetic", confirm_flagged=True)

        self.assertEqual(message.content, "You're pathetic")

    def test_refused_content_does_not_count_towards_limit(self):
        for _ in range(12):
            with self.assertRaises(ValidationError):
                MessageService.send_message(self.sender, self.recipient, 'Go die')

        MessageService.send_message(self.sender, self.recipient, 'Sorry about that')


class SendMessageCooldownTest(TestCase):

    def test_second_message_within_cooldown(self):
        sender, recipient = UserFactory(), UserFactory()
        MessageService.send_message(sender, recipient, 'First')

        with self.assertRaises(RateLimitExceeded) as ctx:
            MessageService.send_message(sender, recipient, 'Second')

        self.assertEqual(ctx.exception.retry_after, 5)


class ConversationTest(TestCase):
    """Test conversations and read state."""

    def setUp(self):
        self.user = UserFactory()
        self.friend = UserFactory()
        self.other = UserFactory()

    def test_conversations_latest_first_with_unread(self):
        DirectMessageFactory(sender=self.friend, recipient=self.user)
        DirectMessageFactory(sender=self.friend, recipient=self.user)
        DirectMessageFactory(sender=self.user, recipient=self.other)

        conversations = MessageService.conversations(self.user)

        self.assertEqual([c['user'] for c in conversations], [self.other, self.friend])
        self.assertEqual([c['unread_count'] for c in conversations], [0, 2])

    def test_mark_read_only_by_recipient(self):
        message = DirectMessageFactory(sender=self.friend, recipient=self.user)

        with self.assertRaises(NotFound):
            MessageService.mark_read(self.friend, message.pk)

        MessageService.mark_read(self.user, message.pk)
        message.refresh_from_db()
        self.assertTrue(message.is_read)
        self.assertIsNotNone(message.read_at)

    def test_mark_conversation_read(self):
        DirectMessageFactory(sender=self.friend, recipient=self.user)
        DirectMessageFactory(sender=self.other, recipient=self.user)

        self.assertEqual(MessageService.mark_conversation_read(self.user, self.friend), 1)
        self.assertEqual(DirectMessage.objects.unread_for(self.user).count(), 1)


class ReportServiceTest(TestCase):
    """Test filing and reviewing reports."""

    def setUp(self):
        self.reporter = UserFactory()
        self.target = UserFactory()

    def test_report_user(self):
        report = ReportService.create_report(
            self.reporter, ContentReport.TYPE_USER, self.target.pk, ContentReport.HARASSMENT,
            details='Repeated unwanted messages')

        self.assertEqual(report.status, ContentReport.PENDING)
        self.assertEqual(report.reported_user, self.target)

    def test_reason_must_match_type(self):
        with self.assertRaises(ValidationError):
            ReportService.create_report(
                self.reporter, ContentReport.TYPE_USER, self.target.pk, ContentReport.THREATS)

    def test_duplicate_report_conflicts(self):
        ReportService.create_report(
            self.reporter, ContentReport.TYPE_USER, self.target.pk, ContentReport.SPAM)

        with self.assertRaises(ConflictError):
            ReportService.create_report(
                self.reporter, ContentReport.TYPE_USER, self.target.pk, ContentReport.HARASSMENT)

    def test_cannot_report_self(self):
        with self.assertRaises(ValidationError):
            ReportService.create_report(
                self.reporter, ContentReport.TYPE_USER, self.reporter.pk, ContentReport.SPAM)

    def test_report_testimony_records_author(self):
        testimony = TestimonyFactory(user=self.target, visibility=Testimony.VISIBILITY_SHAREABLE)

        report = ReportService.create_report(
            self.reporter, ContentReport.TYPE_TESTIMONY, testimony.pk,
            ContentReport.FALSE_INFORMATION)

        self.assertEqual(report.reported_testimony, testimony)
        self.assertEqual(report.reported_user, self.target)

    def test_only_recipient_reports_message(self):
        message = DirectMessageFactory(sender=self.target, recipient=self.reporter)

        with self.assertRaises(NotFound):
            ReportService.create_report(
                UserFactory(), ContentReport.TYPE_MESSAGE, message.pk, ContentReport.THREATS)

        report = ReportService.create_report(
            self.reporter, ContentReport.TYPE_MESSAGE, message.pk, ContentReport.THREATS)
        self.assertEqual(report.reported_user, self.target)

    def test_review_and_counts(self):
        moderator = StaffUserFactory()
        reviewed = ContentReportFactory()
        ContentReportFactory()
        ContentReportFactory()

        ReportService.review(reviewed, moderator, ContentReport.DISMISSED, notes='Not spam')

        reviewed.refresh_from_db()
        self.assertEqual(reviewed.reviewed_by, moderator)
        self.assertEqual(reviewed.review_notes, 'Not spam')
        self.assertEqual(ReportService.counts(), {
            'pending': 2, 'reviewed': 0, 'resolved': 0, 'dismissed': 1, 'total': 3,
        })

    def test_review_rejects_pending(self):
        with self.assertRaises(ValidationError):
            ReportService.review(ContentReportFactory(), StaffUserFactory(), ContentReport.PENDING)
