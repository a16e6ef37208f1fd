"""
Tests for groups API endpoints.
"""

from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from authentication.tests.factories import UserFactory
from groups.models import Group, GroupMembership, GroupMessage

from .factories import GroupFactory, GroupMembershipFactory, PrivateGroupFactory


class GroupViewsTest(APITestCase):
    """Test group CRUD and membership endpoints."""

    def setUp(self):
        self.user = UserFactory()
        self.client.force_authenticate(user=self.user)

    def test_requires_auth(self):
        self.client.force_authenticate(user=None)

        response = self.client.get(reverse('groups:group-list'))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create(self):
        response = self.client.post(reverse('groups:group-list'), {
            'name': 'Worship Team',
            'description': 'Sunday rehearsals',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['member_count'], 1)
        self.assertEqual(response.data['my_role'], GroupMembership.ROLE_LEADER)
        self.assertEqual(response.data['creator']['id'], str(self.user.id))

    def test_create_within_cooldown_is_429(self):
        self.client.post(reverse('groups:group-list'), {'name': 'First'}, format='json')

        response = self.client.post(reverse('groups:group-list'), {'name': 'Second'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(response['Retry-After'], '30')
        self.assertEqual(Group.objects.count(), 1)

    def test_member_limit_bounds(self):
        response = self.client.post(reverse('groups:group-list'), {
            'name': 'Too big',
            'member_limit': 500,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['invalid_params'][0]['name'], 'member_limit')

    def test_list_hides_private_groups(self):
        public = GroupFactory()
        PrivateGroupFactory()

        response = self.client.get(reverse('groups:group-list'))

        self.assertEqual([g['id'] for g in response.data['results']], [str(public.id)])

    def test_list_mine(self):
        GroupFactory()
        private = PrivateGroupFactory()
        GroupMembershipFactory(group=private, user=self.user)

        response = self.client.get(reverse('groups:group-list'), {'mine': 'true'})

        self.assertEqual([g['id'] for g in response.data['results']], [str(private.id)])

    def test_search(self):
        match = GroupFactory(name='Men of Faith')
        GroupFactory(name='Choir')

        response = self.client.get(reverse('groups:group-list'), {'search': 'faith'})

        self.assertEqual([g['id'] for g in response.data['results']], [str(match.id)])

    def test_private_group_is_404_for_outsiders(self):
        group = PrivateGroupFactory()

        response = self.client.get(reverse('groups:group-detail', args=[group.id]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_join_and_leave(self):
        group = GroupFactory()

        response = self.client.post(reverse('groups:group-join', args=[group.id]))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], GroupMembership.STATUS_ACTIVE)

        response = self.client.post(reverse('groups:group-join', args=[group.id]))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        response = self.client.post(reverse('groups:group-leave', args=[group.id]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_join_request_approved_by_leader(self):
        leader = UserFactory()
        group = PrivateGroupFactory(creator=leader)

        response = self.client.post(reverse('groups:group-join', args=[group.id]))
        self.assertEqual(response.data['status'], GroupMembership.STATUS_PENDING)
        membership_id = response.data['id']

        response = self.client.get(reverse('groups:group-requests', args=[group.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=leader)
        response = self.client.get(reverse('groups:group-requests', args=[group.id]))
        self.assertEqual([m['id'] for m in response.data['results']], [membership_id])

        response = self.client.post(
            reverse('groups:group-approve-request', args=[group.id, membership_id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], GroupMembership.STATUS_ACTIVE)

    def test_members(self):
        group = GroupFactory()
        GroupMembershipFactory(group=group, user=self.user)

        response = self.client.get(reverse('groups:group-members', args=[group.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['results'][0]['role'], GroupMembership.ROLE_LEADER)

    def test_delete_by_member_forbidden(self):
        group = GroupFactory()
        GroupMembershipFactory(group=group, user=self.user)

        response = self.client.delete(reverse('groups:group-detail', args=[group.id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['detail'], 'Only group leaders can do that.')


@override_settings(LIGHTNING_RATE_LIMITS={'send_group_message': {'cooldown_ms': 0}})
class GroupMessageViewsTest(APITestCase):
    """Test group chat endpoints."""

    def setUp(self):
        self.user = UserFactory()
        self.group = GroupFactory()
        GroupMembershipFactory(group=self.group, user=self.user)
        self.client.force_authenticate(user=self.user)
        self.url = reverse('groups:group-messages', args=[self.group.id])

    def test_post_and_read(self):
        response = self.client.post(self.url, {'content': 'Praying for you all'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get(self.url)

        self.assertEqual([m['content'] for m in response.data['results']], ['Praying for you all'])

    def test_outsider_forbidden(self):
        self.client.force_authenticate(user=UserFactory())

        response = self.client.post(self.url, {'content': 'Hello'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_threat_is_400(self):
        response = self.client.post(self.url, {'content': 'Bring a gun tomorrow'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['invalid_params'][0]['name'], 'content')
        self.assertFalse(GroupMessage.objects.exists())

    def test_confirmed_flagged_message_reaches_leader_review(self):
        payload = {'content': "You're garbage", 'confirm_flagged': True}
        response = self.client.post(self.url, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_flagged'])

        self.client.force_authenticate(user=self.group.creator)
        response = self.client.get(reverse('groups:group-flagged', args=[self.group.id]))

        self.assertEqual(response.data['results'][0]['flag_reasons'], ['harassment'])
