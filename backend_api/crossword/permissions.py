from __future__ import annotations

from django.conf import settings
from django.utils.crypto import constant_time_compare
from rest_framework import permissions

ADMIN_SECRET_HEADER = "HTTP_X_ADMIN_SECRET"


# PUBLIC_INTERFACE
class IsPuzzleAdmin(permissions.BasePermission):
    """Allow staff users, or requests carrying the configured admin secret code.

    The secret is read from ``settings.ADMIN_SECRET_CODE``; an empty setting
    disables header access so only staff sessions get through.
    """

    message = "Administrator access required."

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated and user.is_staff:
            return True
        expected = getattr(settings, "ADMIN_SECRET_CODE", "") or ""
        provided = request.META.get(ADMIN_SECRET_HEADER, "")
        return bool(expected) and constant_time_compare(provided, expected)
