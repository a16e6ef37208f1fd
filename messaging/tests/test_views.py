"""
Tests for messaging API endpoints.
"""

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from authentication.tests.factories import StaffUserFactory, UserFactory
from messaging.models import ContentReport, DirectMessage
from profiles.models import UserProfile
from profiles.tests.factories import UserProfileFactory

from .factories import ContentReportFactory, DirectMessageFactory


class DirectMessageViewsTest(APITestCase):
    """Test direct message endpoints."""

    def setUp(self):
        self.user = UserFactory()
        self.other = UserFactory()
        self.client.force_authenticate(user=self.user)

    def test_send(self):
        response = self.client.post(reverse('messaging:message-send'), {
            'recipient_id': str(self.other.id),
            'content': 'Hello there',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['recipient']['id'], str(self.other.id))

    def test_send_denied_by_privacy(self):
        UserProfileFactory(user=self.other, message_privacy=UserProfile.MESSAGES_NONE)

        response = self.client.post(reverse('messaging:message-send'), {
            'recipient_id': str(self.other.id),
            'content': 'Hello there',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['detail'], 'This user has disabled messages.')

    def test_send_threat_is_400(self):
        response = self.client.post(reverse('messaging:message-send'), {
            'recipient_id': str(self.other.id),
            'content': "I'm going to stab you",
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['invalid_params'][0]['name'], 'content')
        self.assertFalse(DirectMessage.objects.exists())

    def test_send_flagged_with_confirmation(self):
        payload = {'recipient_id': str(self.other.id), 'content': 'Nobody cares about you'}
        response = self.client.post(reverse('messaging:message-send'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        payload['confirm_flagged'] = True
        response = self.client.post(reverse('messaging:message-send'), payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_send_within_cooldown_is_429(self):
        payload = {'recipient_id': str(self.other.id), 'content': 'Hello'}
        self.client.post(reverse('messaging:message-send'), payload, format='json')

        response = self.client.post(reverse('messaging:message-send'), payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(response['Retry-After'], '5')
        self.assertEqual(response.data['retry_after'], 5)

    def test_empty_message_rejected(self):
        response = self.client.post(reverse('messaging:message-send'), {
            'recipient_id': str(self.other.id),
            'content': '   ',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_conversation_marks_incoming_read(self):
        DirectMessageFactory(sender=self.other, recipient=self.user)
        DirectMessageFactory(sender=self.user, recipient=self.other)

        response = self.client.get(reverse('messaging:conversation-detail', args=[self.other.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertFalse(DirectMessage.objects.unread_for(self.user).exists())

    def test_conversations(self):
        DirectMessageFactory(sender=self.other, recipient=self.user)

        response = self.client.get(reverse('messaging:conversation-list'))

        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['unread_count'], 1)

    def test_mark_read(self):
        message = DirectMessageFactory(sender=self.other, recipient=self.user)

        response = self.client.post(reverse('messaging:message-read', args=[message.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_read'])


class ContentReportViewsTest(APITestCase):
    """Test reporting and the moderation dashboard."""

    def setUp(self):
        self.user = UserFactory()
        self.moderator = StaffUserFactory()
        self.client.force_authenticate(user=self.user)

    def test_any_user_can_report(self):
        target = UserFactory()

        response = self.client.post(reverse('messaging:report-list'), {
            'report_type': ContentReport.TYPE_USER,
            'target_id': str(target.id),
            'reason': ContentReport.IMPERSONATION,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], ContentReport.PENDING)

    def test_mismatched_reason_rejected(self):
        response = self.client.post(reverse('messaging:report-list'), {
            'report_type': ContentReport.TYPE_TESTIMONY,
            'target_id': str(UserFactory().id),
            'reason': ContentReport.IMPERSONATION,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_dashboard_is_staff_only(self):
        response = self.client.get(reverse('messaging:report-list'))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_dashboard_filters_by_status(self):
        ContentReportFactory()
        ContentReportFactory(status=ContentReport.RESOLVED)
        self.client.force_authenticate(user=self.moderator)

        response = self.client.get(reverse('messaging:report-list'), {'status': 'pending'})

        self.assertEqual(response.data['count'], 1)

    def test_review(self):
        report = ContentReportFactory()
        self.client.force_authenticate(user=self.moderator)

        response = self.client.post(
            reverse('messaging:report-review', args=[report.id]),
            {'status': ContentReport.RESOLVED, 'notes': 'User warned'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['report']['status'], ContentReport.RESOLVED)
        self.assertEqual(response.data['report']['reviewed_by']['id'], str(self.moderator.id))

    def test_counts(self):
        ContentReportFactory()
        self.client.force_authenticate(user=self.moderator)

        response = self.client.get(reverse('messaging:report-counts'))

        self.assertEqual(response.data['pending'], 1)
        self.assertEqual(response.data['total'], 1)
