"""
Profiles app business logic services.
"""

from django.db import IntegrityError, transaction
from django.db.models import Count
from django.contrib.auth import get_user_model
from rest_framework.exceptions import NotFound, ValidationError
import structlog

from core.exceptions import ConflictError, PolicyDenied
from core.rate_limiter import rate_limiter_for_user
from privacy.policy import is_user_visible

from .models import Church, UserProfile, generate_invite_code

logger = structlog.get_logger(__name__)
User = get_user_model()


class ProfileService:
    """
    Service for managing user profiles.
    """

    EDITABLE_FIELDS = (
        'display_name',
        'bio',
        'avatar_url',
        'location',
        'profile_visibility',
        'message_privacy',
    )

    @staticmethod
    def get_or_create_profile(user):
        """
        Get or create the profile for the user.
        """
        profile, created = UserProfile.objects.select_related('church').get_or_create(user=user)
        if created:
            logger.info(
                "Created profile for user",
                user_id=str(user.id),
            )
        return profile

    @staticmethod
    @transaction.atomic
    def update_profile(user, profile_data):
        """
        Update user profile with rate limiting and change logging.
        """
        limiter = rate_limiter_for_user(user)
        limiter.require('update_profile')

        profile = ProfileService.get_or_create_profile(user)

        changes = {}
        for field in ProfileService.EDITABLE_FIELDS:
            if field not in profile_data:
                continue
            old_value = getattr(profile, field)
            new_value = profile_data[field]
            if old_value != new_value:
                setattr(profile, field, new_value)
                changes[field] = {'old': old_value, 'new': new_value}

        if not changes:
            return profile

        profile.save()
        limiter.record_attempt('update_profile')
        logger.info(
            "Profile updated",
            user_id=str(user.id),
            changes=sorted(changes),
        )
        return profile

    @staticmethod
    def get_visible_profile(user_id, viewer):
        """
        Return the profile of ``user_id`` if ``viewer`` may see it.

        Raises NotFound for unknown users and PolicyDenied otherwise.
        """
        try:
            profile = UserProfile.objects.select_related('user', 'church').get(user_id=user_id)
        except UserProfile.DoesNotExist:
            raise NotFound("User not found.")

        viewer_id = viewer.pk if viewer is not None and viewer.is_authenticated else None
        decision = is_user_visible(profile.user_id, viewer_id)
        if not decision:
            raise PolicyDenied(decision.reason)

        return profile


class ChurchService:
    """
    Service for churches and church membership.
    """

    @staticmethod
    def with_member_counts():
        return Church.objects.annotate(member_count=Count('members'))

    @staticmethod
    def get_church(church_id):
        try:
            return ChurchService.with_member_counts().get(pk=church_id)
        except Church.DoesNotExist:
            raise NotFound("Church not found.")

    @staticmethod
    @transaction.atomic
    def create_church(user, name, city='', denomination=''):
        """
        Create a church and make its creator the first member.
        """
        church = Church.objects.create(
            name=name,
            city=city,
            denomination=denomination,
            created_by=user,
        )
        profile = ProfileService.get_or_create_profile(user)
        previous = profile.church_id
        profile.church = church
        profile.save(update_fields=['church', 'updated_at'])

        logger.info(
            "Church created",
            user_id=str(user.id),
            church_id=str(church.id),
            left_church_id=str(previous) if previous else None,
        )
        return church

    @staticmethod
    @transaction.atomic
    def join_by_code(user, code):
        """
        Join the church with the given invite code, leaving any current one.
        """
        try:
            church = Church.objects.get(invite_code=(code or '').strip())
        except Church.DoesNotExist:
            raise ValidationError({'code': "Invalid invite code."})

        profile = ProfileService.get_or_create_profile(user)
        if profile.church_id == church.id:
            raise ConflictError("You are already a member of this church.")

        previous = profile.church_id
        profile.church = church
        profile.save(update_fields=['church', 'updated_at'])

        logger.info(
            "User joined church",
            user_id=str(user.id),
            church_id=str(church.id),
            left_church_id=str(previous) if previous else None,
        )
        return church

    @staticmethod
    def leave(user):
        profile = ProfileService.get_or_create_profile(user)
        if profile.church_id is None:
            raise ValidationError({'church': "You are not a member of any church."})

        church_id = profile.church_id
        profile.church = None
        profile.save(update_fields=['church', 'updated_at'])

        logger.info("User left church", user_id=str(user.id), church_id=str(church_id))

    @staticmethod
    def regenerate_invite_code(user, church):
        if church.created_by_id != user.pk:
            raise PolicyDenied("Only the church creator can change the invite code.")

        # A collision on the unique column is astronomically rare; retry once.
        for attempt in range(2):
            church.invite_code = generate_invite_code()
            try:
                with transaction.atomic():
                    church.save(update_fields=['invite_code'])
                break
            except IntegrityError:
                if attempt:
                    raise

        logger.info("Church invite code regenerated", user_id=str(user.id), church_id=str(church.id))
        return church

    @staticmethod
    def members_visible_to(church, viewer):
        """
        Member profiles of ``church`` that ``viewer`` is allowed to see.
        """
        members = (
            UserProfile.objects
            .filter(church=church)
            .select_related('user', 'church')
            .order_by('user__username')
        )
        return [
            profile for profile in members
            if is_user_visible(profile.user_id, viewer.pk)
        ]
