"""
Factory Boy factories for profiles app testing.
"""

import factory
from factory.django import DjangoModelFactory

from authentication.tests.factories import UserFactory
from profiles.models import Church, UserProfile


class ChurchFactory(DjangoModelFactory):
    """Factory for Church model."""

    class Meta:
        model = Church

    name = factory.Sequence(lambda n: f"Grace Chapel {n}")
    city = factory.Faker('city')
    denomination = 'Non-denominational'


class UserProfileFactory(DjangoModelFactory):
    """
    Factory for UserProfile.

    Users get a profile from a post_save signal, so this updates that row
    instead of inserting a second one.
    """

    class Meta:
        model = UserProfile

    user = factory.SubFactory(UserFactory)
    display_name = factory.Faker('name')
    bio = factory.Faker('sentence')
    church = None
    profile_visibility = UserProfile.VISIBILITY_PUBLIC
    message_privacy = UserProfile.MESSAGES_EVERYONE

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        user = kwargs.pop('user')
        profile, _ = model_class.objects.update_or_create(user=user, defaults=kwargs)
        return profile
