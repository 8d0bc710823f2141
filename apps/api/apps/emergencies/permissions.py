"""
Emergency permissions.
"""
from rest_framework import permissions


class IsPostOwner(permissions.BasePermission):
    """Object-level: only the user who published the post."""
    message = 'Only the poster can manage this emergency post.'

    def has_object_permission(self, request, view, obj):
        return obj.posted_by_id == request.user.id
