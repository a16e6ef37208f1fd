"""
Factory Boy factories for messaging app testing.
"""

import factory
from factory.django import DjangoModelFactory

from authentication.tests.factories import UserFactory
from messaging.models import ContentReport, DirectMessage


class DirectMessageFactory(DjangoModelFactory):

    class Meta:
        model = DirectMessage

    sender = factory.SubFactory(UserFactory)
    recipient = factory.SubFactory(UserFactory)
    content = factory.Faker('sentence')


class ContentReportFactory(DjangoModelFactory):
    """Factory for a pending report against a user."""

    class Meta:
        model = ContentReport

    reporter = factory.SubFactory(UserFactory)
    reported_user = factory.SubFactory(UserFactory)
    report_type = ContentReport.TYPE_USER
    reason = ContentReport.SPAM
    details = ''
