"""
Tests for testimony services and the visible_to queryset.
"""

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase, override_settings
from rest_framework.exceptions import NotFound

from authentication.tests.factories import UserFactory
from connections.tests.factories import AcceptedFriendshipFactory, FollowFactory, FriendshipFactory
from core.exceptions import ConflictError, PolicyDenied, RateLimitExceeded
from privacy.policy import can_view_testimony
from profiles.tests.factories import ChurchFactory, UserProfileFactory
from testimonies.models import Testimony, TestimonyLike, TestimonyView
from testimonies.services import TestimonyService

from .factories import TestimonyCommentFactory, TestimonyFactory

CONTENT = "God carried me through the hardest year of my life."


class TestimonyCreateTest(TestCase):
    """Test publishing testimonies."""

    def setUp(self):
        self.user = UserFactory()

    def test_create_counts_words(self):
        testimony = TestimonyService.create_testimony(self.user, {'content': CONTENT})

        self.assertEqual(testimony.word_count, 10)
        self.assertEqual(testimony.visibility, Testimony.VISIBILITY_ALL_CHURCHES)
        self.assertEqual(testimony.title, 'My Testimony')

    def test_one_testimony_per_user(self):
        TestimonyFactory(user=self.user)

        with self.assertRaises(ConflictError):
            TestimonyService.create_testimony(self.user, {'content': CONTENT})

    @override_settings(LIGHTNING_RATE_LIMITS={'create_testimony': {'max_attempts': 1}})
    def test_create_rate_limited_after_delete(self):
        testimony = TestimonyService.create_testimony(self.user, {'content': CONTENT})
        TestimonyService.delete_testimony(self.user, testimony.pk)

        with self.assertRaises(RateLimitExceeded) as ctx:
            TestimonyService.create_testimony(self.user, {'content': CONTENT})

        self.assertEqual(ctx.exception.retry_after, 60)


class TestimonyOwnershipTest(TestCase):
    """Test owner-only changes."""

    def setUp(self):
        self.testimony = TestimonyFactory()
        self.owner = self.testimony.user

    def test_owner_updates(self):
        TestimonyService.update_testimony(self.owner, self.testimony.pk, {
            'visibility': Testimony.VISIBILITY_SHAREABLE,
            'content': CONTENT,
        })

        self.testimony.refresh_from_db()
        self.assertEqual(self.testimony.visibility, Testimony.VISIBILITY_SHAREABLE)
        self.assertEqual(self.testimony.word_count, 10)

    def test_others_cannot_update_or_delete(self):
        stranger = UserFactory()

        with self.assertRaises(PolicyDenied):
            TestimonyService.update_testimony(stranger, self.testimony.pk, {'title': 'Mine now'})
        with self.assertRaises(PolicyDenied):
            TestimonyService.delete_testimony(stranger, self.testimony.pk)

    def test_missing_testimony(self):
        with self.assertRaises(NotFound):
            TestimonyService.delete_testimony(self.owner, '00000000-0000-0000-0000-000000000000')


class TestimonyVisibilityTest(TestCase):
    """Test get_visible and the visible_to queryset against the policy."""

    def setUp(self):
        self.church = ChurchFactory(name='Grace Chapel')
        self.owner = UserFactory()
        UserProfileFactory(user=self.owner, church=self.church)

    def test_my_church_hidden_from_friend(self):
        testimony = TestimonyFactory(user=self.owner, visibility=Testimony.VISIBILITY_MY_CHURCH)
        friend = UserFactory()
        AcceptedFriendshipFactory(requester=self.owner, addressee=friend)

        with self.assertRaises(PolicyDenied):
            TestimonyService.get_visible(testimony.pk, friend)
        self.assertFalse(Testimony.objects.visible_to(friend).exists())

    def test_all_churches_visible_to_follower(self):
        testimony = TestimonyFactory(user=self.owner)
        follower = UserFactory()
        FollowFactory(follower=follower, following=self.owner)

        self.assertEqual(TestimonyService.get_visible(testimony.pk, follower), testimony)

    def test_shareable_visible_to_anonymous(self):
        testimony = TestimonyFactory(user=self.owner, visibility=Testimony.VISIBILITY_SHAREABLE)

        self.assertEqual(TestimonyService.get_visible(testimony.pk, AnonymousUser()), testimony)
        self.assertEqual(list(Testimony.objects.visible_to(AnonymousUser())), [testimony])

    def test_queryset_agrees_with_policy(self):
        church_member = UserFactory()
        UserProfileFactory(user=church_member, church=self.church)
        friend = UserFactory()
        AcceptedFriendshipFactory(requester=friend, addressee=self.owner)
        pending = UserFactory()
        FriendshipFactory(requester=pending, addressee=self.owner)
        follower = UserFactory()
        FollowFactory(follower=follower, following=self.owner)
        stranger = UserFactory()
        viewers = [self.owner, church_member, friend, pending, follower, stranger]

        testimony = TestimonyFactory(user=self.owner)
        for visibility, _ in Testimony.VISIBILITY_CHOICES:
            Testimony.objects.filter(pk=testimony.pk).update(visibility=visibility)
            for viewer in viewers:
                with self.subTest(visibility=visibility, viewer=viewer.username):
                    self.assertEqual(
                        Testimony.objects.visible_to(viewer).filter(pk=testimony.pk).exists(),
                        can_view_testimony(self.owner.pk, viewer.pk).allowed,
                    )


class TestimonyInteractionTest(TestCase):
    """Test likes, views and comments."""

    def setUp(self):
        self.testimony = TestimonyFactory(visibility=Testimony.VISIBILITY_SHAREABLE)
        self.owner = self.testimony.user
        self.reader = UserFactory()

    @override_settings(LIGHTNING_RATE_LIMITS={'like_testimony': {'cooldown_ms': 0}})
    def test_like_toggles(self):
        self.assertEqual(TestimonyService.toggle_like(self.reader, self.testimony.pk), (True, 1))
        self.assertEqual(TestimonyService.toggle_like(self.reader, self.testimony.pk), (False, 0))
        self.assertFalse(TestimonyLike.objects.exists())

    def test_like_hidden_testimony_denied(self):
        hidden = TestimonyFactory(visibility=Testimony.VISIBILITY_MY_CHURCH)

        with self.assertRaises(PolicyDenied):
            TestimonyService.toggle_like(self.reader, hidden.pk)

    def test_view_tracked_once(self):
        self.assertTrue(TestimonyService.track_view(self.reader, self.testimony.pk))
        self.assertFalse(TestimonyService.track_view(self.reader, self.testimony.pk))
        self.assertEqual(TestimonyView.objects.count(), 1)

    def test_owner_view_not_counted(self):
        self.assertFalse(TestimonyService.track_view(self.owner, self.testimony.pk))
        self.assertFalse(TestimonyView.objects.exists())

    def test_annotated_counts(self):
        TestimonyService.track_view(self.reader, self.testimony.pk)
        TestimonyService.toggle_like(self.reader, self.testimony.pk)
        TestimonyCommentFactory(testimony=self.testimony)
        TestimonyCommentFactory(testimony=self.testimony)

        testimony = TestimonyService.get_visible(self.testimony.pk, self.reader)

        self.assertEqual(
            (testimony.like_count, testimony.view_count, testimony.comment_count), (1, 1, 2))

    def test_add_comment(self):
        comment = TestimonyService.add_comment(self.reader, self.testimony.pk, 'Amen!')

        self.assertEqual(list(TestimonyService.comments(self.owner, self.testimony.pk)), [comment])

    def test_comment_deleted_by_author_or_owner(self):
        first = TestimonyCommentFactory(testimony=self.testimony, author=self.reader)
        second = TestimonyCommentFactory(testimony=self.testimony, author=self.reader)

        with self.assertRaises(PolicyDenied):
            TestimonyService.delete_comment(UserFactory(), self.testimony.pk, first.pk)

        TestimonyService.delete_comment(self.reader, self.testimony.pk, first.pk)
        TestimonyService.delete_comment(self.owner, self.testimony.pk, second.pk)
        self.assertFalse(self.testimony.comments.exists())
