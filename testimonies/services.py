"""
Testimony business logic.
"""

from django.db import IntegrityError, transaction
from django.db.models import Count
from rest_framework.exceptions import NotFound
import structlog

from core.exceptions import ConflictError, PolicyDenied
from core.rate_limiter import rate_limiter_for_user
from privacy.policy import can_view_testimony

from .models import Testimony, TestimonyComment, TestimonyLike, TestimonyView

logger = structlog.get_logger(__name__)


class TestimonyService:
    """
    Service for creating, reading and interacting with testimonies.
    """

    EDITABLE_FIELDS = ('title', 'content', 'lesson', 'visibility')

    @staticmethod
    def annotated(queryset=None):
        queryset = Testimony.objects.all() if queryset is None else queryset
        return queryset.select_related('user', 'user__profile').annotate(
            like_count=Count('likes', distinct=True),
            view_count=Count('views', distinct=True),
            comment_count=Count('comments', distinct=True),
        )

    @staticmethod
    def visible_to(viewer):
        return TestimonyService.annotated(Testimony.objects.visible_to(viewer))

    @staticmethod
    def _viewer_id(viewer):
        if viewer is None or not viewer.is_authenticated:
            return None
        return viewer.pk

    @staticmethod
    def get_visible(testimony_id, viewer):
        """
        Fetch a testimony and check that ``viewer`` may read it.
        """
        try:
            testimony = TestimonyService.annotated().get(pk=testimony_id)
        except Testimony.DoesNotExist:
            raise NotFound("Testimony not found.")

        decision = can_view_testimony(testimony.user_id, TestimonyService._viewer_id(viewer))
        if not decision:
            raise PolicyDenied(decision.reason)
        return testimony

    @staticmethod
    def get_for_user(owner, viewer):
        try:
            testimony = TestimonyService.annotated().get(user=owner)
        except Testimony.DoesNotExist:
            raise NotFound("This user has not shared a testimony.")

        decision = can_view_testimony(owner.pk, TestimonyService._viewer_id(viewer))
        if not decision:
            raise PolicyDenied(decision.reason)
        return testimony

    @staticmethod
    def create_testimony(user, data):
        """
        Publish ``user``'s testimony. Each user has at most one.
        """
        if Testimony.objects.filter(user=user).exists():
            raise ConflictError("You have already shared a testimony. Edit it instead.")

        limiter = rate_limiter_for_user(user)
        limiter.require('create_testimony')

        try:
            with transaction.atomic():
                testimony = Testimony.objects.create(user=user, **data)
        except IntegrityError:
            raise ConflictError("You have already shared a testimony. Edit it instead.")

        limiter.record_attempt('create_testimony')

        logger.info(
            "Testimony created",
            user_id=str(user.pk),
            testimony_id=str(testimony.pk),
            visibility=testimony.visibility,
            word_count=testimony.word_count,
        )
        return testimony

    @staticmethod
    def _owned(user, testimony_id):
        try:
            testimony = Testimony.objects.get(pk=testimony_id)
        except Testimony.DoesNotExist:
            raise NotFound("Testimony not found.")

        if testimony.user_id != user.pk:
            raise PolicyDenied("You can only change your own testimony.")
        return testimony

    @staticmethod
    def update_testimony(user, testimony_id, data):
        testimony = TestimonyService._owned(user, testimony_id)

        changed = [f for f in TestimonyService.EDITABLE_FIELDS
                   if f in data and getattr(testimony, f) != data[f]]
        for field in changed:
            setattr(testimony, field, data[field])

        if changed:
            testimony.save(update_fields=changed + ['updated_at'])
            logger.info(
                "Testimony updated",
                user_id=str(user.pk),
                testimony_id=str(testimony.pk),
                changes=changed,
            )
        return testimony

    @staticmethod
    def delete_testimony(user, testimony_id):
        testimony = TestimonyService._owned(user, testimony_id)
        testimony.delete()
        logger.info("Testimony deleted", user_id=str(user.pk), testimony_id=str(testimony_id))

    @staticmethod
    @transaction.atomic
    def toggle_like(user, testimony_id):
        """
        Like the testimony, or remove the like if there already is one.

        Returns (liked, like_count).
        """
        testimony = TestimonyService.get_visible(testimony_id, user)

        limiter = rate_limiter_for_user(user)
        limiter.require('like_testimony')

        deleted, _ = TestimonyLike.objects.filter(testimony=testimony, user=user).delete()
        if not deleted:
            TestimonyLike.objects.create(testimony=testimony, user=user)

        limiter.record_attempt('like_testimony')

        liked = not deleted
        logger.info(
            "Testimony like toggled",
            user_id=str(user.pk),
            testimony_id=str(testimony.pk),
            liked=liked,
        )
        return liked, TestimonyLike.objects.filter(testimony=testimony).count()

    @staticmethod
    def track_view(user, testimony_id):
        """
        Record that ``user`` read the testimony. Owners and repeat views are
        not counted.

        Returns True when a new view was recorded.
        """
        testimony = TestimonyService.get_visible(testimony_id, user)
        if testimony.user_id == user.pk:
            return False

        _, created = TestimonyView.objects.get_or_create(testimony=testimony, viewer=user)
        return created

    @staticmethod
    def comments(user, testimony_id):
        testimony = TestimonyService.get_visible(testimony_id, user)
        return (
            TestimonyComment.objects
            .filter(testimony=testimony)
            .select_related('author', 'author__profile')
            .order_by('created_at')
        )

    @staticmethod
    def add_comment(user, testimony_id, content):
        testimony = TestimonyService.get_visible(testimony_id, user)

        limiter = rate_limiter_for_user(user)
        limiter.require('add_reaction')

        comment = TestimonyComment.objects.create(
            testimony=testimony,
            author=user,
            content=content,
        )
        limiter.record_attempt('add_reaction')

        logger.info(
            "Testimony comment added",
            user_id=str(user.pk),
            testimony_id=str(testimony.pk),
            comment_id=str(comment.pk),
        )
        return comment

    @staticmethod
    def delete_comment(user, testimony_id, comment_id):
        """
        Delete a comment. Allowed for its author and the testimony owner.
        """
        try:
            comment = TestimonyComment.objects.select_related('testimony').get(
                pk=comment_id, testimony_id=testimony_id)
        except TestimonyComment.DoesNotExist:
            raise NotFound("Comment not found.")

        if user.pk not in (comment.author_id, comment.testimony.user_id):
            raise PolicyDenied("You cannot delete this comment.")

        comment.delete()
        logger.info(
            "Testimony comment deleted",
            user_id=str(user.pk),
            testimony_id=str(testimony_id),
            comment_id=str(comment_id),
        )
