"""
Tests for testimony API endpoints.
"""

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from authentication.tests.factories import UserFactory
from testimonies.models import Testimony

from .factories import TestimonyCommentFactory, TestimonyFactory


class TestimonyViewSetTest(APITestCase):
    """Test the testimony endpoints."""

    def setUp(self):
        self.user = UserFactory()
        self.client.force_authenticate(user=self.user)

    def test_create(self):
        response = self.client.post(reverse('testimonies:testimony-list'), {
            'title': 'Found hope',
            'content': 'After years of doubt I found hope in a small church.',
            'visibility': Testimony.VISIBILITY_SHAREABLE,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_owner'])
        self.assertEqual(response.data['like_count'], 0)

    def test_create_too_short(self):
        response = self.client.post(
            reverse('testimonies:testimony-list'), {'content': 'Too short.'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_second_testimony_conflicts(self):
        TestimonyFactory(user=self.user)

        response = self.client.post(reverse('testimonies:testimony-list'), {
            'content': 'Another story that is long enough to be accepted.',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_list_only_visible(self):
        shared = TestimonyFactory(visibility=Testimony.VISIBILITY_SHAREABLE)
        TestimonyFactory(visibility=Testimony.VISIBILITY_MY_CHURCH)

        response = self.client.get(reverse('testimonies:testimony-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([t['id'] for t in response.data['results']], [str(shared.id)])

    def test_anonymous_can_read_shareable(self):
        self.client.force_authenticate(user=None)
        shared = TestimonyFactory(visibility=Testimony.VISIBILITY_SHAREABLE)

        response = self.client.get(reverse('testimonies:testimony-detail', args=[shared.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_liked'])

    def test_retrieve_hidden_is_forbidden(self):
        hidden = TestimonyFactory(visibility=Testimony.VISIBILITY_MY_CHURCH)

        response = self.client.get(reverse('testimonies:testimony-detail', args=[hidden.id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(
            response.data['detail'], 'You do not have permission to view this testimony.')

    def test_for_user(self):
        testimony = TestimonyFactory(visibility=Testimony.VISIBILITY_SHAREABLE)

        response = self.client.get(
            reverse('testimonies:testimony-for-user', args=[testimony.user.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], str(testimony.id))

    def test_update_and_delete_own(self):
        testimony = TestimonyFactory(user=self.user)
        url = reverse('testimonies:testimony-detail', args=[testimony.id])

        updated = self.client.patch(url, {'title': 'New title'}, format='json')
        self.assertEqual(updated.status_code, status.HTTP_200_OK)
        self.assertEqual(updated.data['title'], 'New title')

        deleted = self.client.delete(url)
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Testimony.objects.exists())

    def test_cannot_delete_others(self):
        testimony = TestimonyFactory(visibility=Testimony.VISIBILITY_SHAREABLE)

        response = self.client.delete(reverse('testimonies:testimony-detail', args=[testimony.id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_like_and_view(self):
        testimony = TestimonyFactory(visibility=Testimony.VISIBILITY_SHAREABLE)

        liked = self.client.post(reverse('testimonies:testimony-like', args=[testimony.id]))
        viewed = self.client.post(reverse('testimonies:testimony-record-view', args=[testimony.id]))

        self.assertEqual(liked.data, {'liked': True, 'like_count': 1})
        self.assertEqual(viewed.data, {'recorded': True})

    def test_comments(self):
        testimony = TestimonyFactory(visibility=Testimony.VISIBILITY_SHAREABLE)
        url = reverse('testimonies:testimony-comments', args=[testimony.id])

        created = self.client.post(url, {'content': 'Praise God!'}, format='json')
        listing = self.client.get(url)

        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        self.assertEqual(listing.data['count'], 1)

    def test_delete_comment(self):
        testimony = TestimonyFactory(visibility=Testimony.VISIBILITY_SHAREABLE)
        comment = TestimonyCommentFactory(testimony=testimony, author=self.user)

        response = self.client.delete(
            reverse('testimonies:testimony-delete-comment', args=[testimony.id, comment.id]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
