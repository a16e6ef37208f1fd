"""
Factory Boy factories for authentication testing.
"""

import factory
from factory.django import DjangoModelFactory
from django.contrib.auth import get_user_model

User = get_user_model()


class UserFactory(DjangoModelFactory):
    """Factory for User model."""

    class Meta:
        model = User
        django_get_or_create = ('email',)

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda obj: f"{obj.username}@example.com")
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    is_active = True
    is_staff = False
    is_superuser = False

    @factory.post_generation
    def password(self, create, extracted, **kwargs):
        """Set user password."""
        if not create:
            return

        password = extracted or 'TestPassword123!'
        self.set_password(password)
        self.save()


class StaffUserFactory(UserFactory):
    """Factory for moderators who can see the report dashboard."""

    is_staff = True
    username = factory.Sequence(lambda n: f"moderator{n}")
