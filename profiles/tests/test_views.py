"""
Tests for profile and church endpoints.
"""

import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from connections.tests.factories import FollowFactory
from profiles.models import UserProfile

from .factories import ChurchFactory, UserProfileFactory


class MyProfileViewTest(APITestCase):
    """Test profiles/me/."""

    def setUp(self):
        self.user = UserFactory(username='grace')
        self.client.force_authenticate(user=self.user)

    def test_get_own_profile_includes_settings(self):
        FollowFactory(following=self.user)

        response = self.client.get(reverse('profiles:profile-me'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'grace')
        self.assertEqual(response.data['message_privacy'], UserProfile.MESSAGES_EVERYONE)
        self.assertEqual(response.data['follower_count'], 1)
        self.assertEqual(response.data['following_count'], 0)

    def test_patch_privacy_settings(self):
        response = self.client.patch(reverse('profiles:profile-me'), {
            'profile_visibility': UserProfile.VISIBILITY_PRIVATE,
            'message_privacy': UserProfile.MESSAGES_NONE,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.profile.refresh_from_db()
        self.assertTrue(self.user.profile.is_private)
        self.assertEqual(self.user.profile.message_privacy, UserProfile.MESSAGES_NONE)

    def test_patch_rejects_unknown_choice(self):
        response = self.client.patch(
            reverse('profiles:profile-me'), {'message_privacy': 'sometimes'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('invalid_params', response.data)


class UserProfileViewTest(APITestCase):
    """Test profiles/<user_id>/."""

    def setUp(self):
        self.viewer = UserFactory()
        self.owner = UserFactory()
        self.client.force_authenticate(user=self.viewer)

    def test_public_profile_hides_settings(self):
        response = self.client.get(reverse('profiles:user-profile', args=[self.owner.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn('email', response.data)
        self.assertNotIn('message_privacy', response.data)

    def test_private_profile_forbidden(self):
        UserProfileFactory(user=self.owner, profile_visibility=UserProfile.VISIBILITY_PRIVATE)

        response = self.client.get(reverse('profiles:user-profile', args=[self.owner.id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['detail'], 'This profile is private.')

    def test_private_profile_visible_to_church_member(self):
        church = ChurchFactory()
        UserProfileFactory(user=self.owner, church=church,
                           profile_visibility=UserProfile.VISIBILITY_PRIVATE)
        UserProfileFactory(user=self.viewer, church=church)

        response = self.client.get(reverse('profiles:user-profile', args=[self.owner.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)


class ChurchViewsTest(APITestCase):
    """Test church endpoints."""

    def setUp(self):
        self.user = UserFactory()
        self.client.force_authenticate(user=self.user)

    def test_create_church(self):
        response = self.client.post(
            reverse('profiles:church-list'), {'name': 'Grace Chapel', 'city': 'York'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['member_count'], 1)
        self.assertEqual(len(response.data['invite_code']), 8)

    def test_invite_code_hidden_from_non_members(self):
        church = ChurchFactory()

        response = self.client.get(reverse('profiles:church-detail', args=[church.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['invite_code'])

    def test_join_and_leave(self):
        church = ChurchFactory()

        joined = self.client.post(
            reverse('profiles:church-join'), {'code': church.invite_code}, format='json')
        self.assertEqual(joined.status_code, status.HTTP_200_OK)
        self.assertEqual(joined.data['invite_code'], church.invite_code)

        again = self.client.post(
            reverse('profiles:church-join'), {'code': church.invite_code}, format='json')
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)

        left = self.client.post(reverse('profiles:church-leave'))
        self.assertEqual(left.status_code, status.HTTP_204_NO_CONTENT)

    def test_members(self):
        church = ChurchFactory()
        UserProfileFactory(church=church)
        UserProfileFactory(church=church, profile_visibility=UserProfile.VISIBILITY_PRIVATE)

        response = self.client.get(reverse('profiles:church-members', args=[church.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_regenerate_code_forbidden_for_non_creator(self):
        church = ChurchFactory()

        response = self.client.post(reverse('profiles:church-invite-code', args=[church.id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


@pytest.mark.django_db
class TestProfileViewsWithPytest:
    """Pytest-style tests for profile views over real JWT auth."""

    def test_bearer_token_reaches_own_profile(self, api_client):
        user = UserFactory()

        refresh = RefreshToken.for_user(user)
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')

        response = api_client.get(reverse('profiles:profile-me'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(user.id)

    @pytest.fixture
    def api_client(self):
        """Fixture to provide API client."""
        return APIClient()
