"""
AI Blog — DRF permission for the read-only plan API (same shared admin key).
"""

from rest_framework.permissions import BasePermission

from .views import _is_authed


class HasAdminKey(BasePermission):
    message = "invalid or missing admin key"

    def has_permission(self, request, view):
        return _is_authed(request)
