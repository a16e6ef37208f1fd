"""
Relationship lookups used by the visibility policy.

The policy never touches the ORM directly: it asks a ``RelationshipLookup``
about users, testimonies, friendships and follows. ``OrmRelationshipLookup``
answers from the database; ``InMemoryRelationshipLookup`` answers from plain
Python data and is used to exercise the policy rules in isolation.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Protocol, Set, Tuple

from django.db import DatabaseError
from django.db.models import Q

from connections.models import Follow, Friendship
from profiles.models import UserProfile
from testimonies.models import Testimony


class RelationshipLookupError(Exception):
    """The underlying store could not answer a relationship question."""


@dataclass(frozen=True)
class UserPrivacy:
    id: str
    church_id: Optional[str] = None
    profile_visibility: str = UserProfile.VISIBILITY_PUBLIC
    message_privacy: str = UserProfile.MESSAGES_EVERYONE


class RelationshipLookup(Protocol):
    """
    Read-only questions the policy asks.

    Implementations raise ``RelationshipLookupError`` when they cannot answer;
    the policy treats that as a denial.
    """

    def get_user(self, user_id) -> Optional[UserPrivacy]:
        ...

    def get_testimony_visibility(self, owner_id) -> Optional[str]:
        ...

    def are_friends(self, user_a, user_b) -> bool:
        """Accepted friendship in either direction."""
        ...

    def is_following(self, follower_id, followee_id) -> bool:
        ...


def _str_or_none(value):
    return str(value) if value is not None else None


def _as_uuid(value):
    """Parse an id; anything that is not a UUID cannot match a row."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class OrmRelationshipLookup:
    """Answers relationship questions from the Django ORM."""

    def get_user(self, user_id):
        user_id = _as_uuid(user_id)
        if user_id is None:
            return None
        try:
            row = (
                UserProfile.objects
                .filter(user_id=user_id)
                .values('user_id', 'church_id', 'profile_visibility', 'message_privacy')
                .first()
            )
        except DatabaseError as exc:
            raise RelationshipLookupError(str(exc)) from exc

        if row is None:
            return None

        return UserPrivacy(
            id=str(row['user_id']),
            church_id=_str_or_none(row['church_id']),
            profile_visibility=row['profile_visibility'],
            message_privacy=row['message_privacy'],
        )

    def get_testimony_visibility(self, owner_id):
        owner_id = _as_uuid(owner_id)
        if owner_id is None:
            return None
        try:
            return (
                Testimony.objects
                .filter(user_id=owner_id)
                .values_list('visibility', flat=True)
                .first()
            )
        except DatabaseError as exc:
            raise RelationshipLookupError(str(exc)) from exc

    def are_friends(self, user_a, user_b):
        user_a, user_b = _as_uuid(user_a), _as_uuid(user_b)
        if user_a is None or user_b is None:
            return False
        try:
            return Friendship.objects.accepted().filter(
                Q(requester_id=user_a, addressee_id=user_b) |
                Q(requester_id=user_b, addressee_id=user_a)
            ).exists()
        except DatabaseError as exc:
            raise RelationshipLookupError(str(exc)) from exc

    def is_following(self, follower_id, followee_id):
        follower_id, followee_id = _as_uuid(follower_id), _as_uuid(followee_id)
        if follower_id is None or followee_id is None:
            return False
        try:
            return Follow.objects.filter(
                follower_id=follower_id, following_id=followee_id
            ).exists()
        except DatabaseError as exc:
            raise RelationshipLookupError(str(exc)) from exc


class InMemoryRelationshipLookup:
    """
    Relationship data held in dicts and sets.

        lookup = InMemoryRelationshipLookup(
            users=[UserPrivacy('a', church_id='grace'), UserPrivacy('b')],
            testimonies={'a': 'my_church'},
            friendships=[('a', 'b')],
        )
    """

    def __init__(
        self,
        users: Iterable[UserPrivacy] = (),
        testimonies: Optional[Dict[str, str]] = None,
        friendships: Iterable[Tuple[str, str]] = (),
        follows: Iterable[Tuple[str, str]] = (),
    ):
        self.users: Dict[str, UserPrivacy] = {u.id: u for u in users}
        self.testimonies: Dict[str, str] = dict(testimonies or {})
        self.friendships: Set[frozenset] = {frozenset(pair) for pair in friendships}
        self.follows: Set[Tuple[str, str]] = set(follows)

    def get_user(self, user_id):
        return self.users.get(user_id)

    def get_testimony_visibility(self, owner_id):
        return self.testimonies.get(owner_id)

    def are_friends(self, user_a, user_b):
        return frozenset((user_a, user_b)) in self.friendships

    def is_following(self, follower_id, followee_id):
        return (follower_id, followee_id) in self.follows
