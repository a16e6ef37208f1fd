"""
Factory Boy factories for testimonies app testing.
"""

import factory
from factory.django import DjangoModelFactory

from authentication.tests.factories import UserFactory
from testimonies.models import Testimony, TestimonyComment, TestimonyLike


class TestimonyFactory(DjangoModelFactory):
    """Factory for Testimony model."""

    class Meta:
        model = Testimony

    user = factory.SubFactory(UserFactory)
    title = factory.Faker('sentence', nb_words=4)
    content = factory.Faker('paragraph', nb_sentences=6)
    lesson = factory.Faker('sentence')
    visibility = Testimony.VISIBILITY_ALL_CHURCHES


class TestimonyLikeFactory(DjangoModelFactory):

    class Meta:
        model = TestimonyLike

    testimony = factory.SubFactory(TestimonyFactory)
    user = factory.SubFactory(UserFactory)


class TestimonyCommentFactory(DjangoModelFactory):

    class Meta:
        model = TestimonyComment

    testimony = factory.SubFactory(TestimonyFactory)
    author = factory.SubFactory(UserFactory)
    content = factory.Faker('sentence')
