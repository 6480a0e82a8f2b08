"""Permission classes shared by the booking endpoints."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def user_is_admin(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_admin") and user.is_admin()


class IsAdmin(permissions.BasePermission):
    """Only administrators of the platform."""

    message = "You do not have permission to perform this action."

    def has_permission(self, request, view) -> bool:  # type: ignore
        return user_is_admin(request.user)
