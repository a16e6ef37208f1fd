"""
Permission classes for messaging app.
"""

from rest_framework import permissions


class IsModerator(permissions.BasePermission):
    """
    Staff-only access to the report dashboard. Anyone signed in may file a
    report.
    """

    message = "Only moderators can review reports."

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if view.action == 'create':
            return True
        return request.user.is_staff
