from rest_framework.permissions import BasePermission

from .models import AdminSession
from .sessions import is_session_active


def get_admin_session(request):
    """
    Resolve the AdminSession named by the token's ``sid`` claim.
    The result is cached on the request.
    """
    if hasattr(request, "_admin_session"):
        return request._admin_session

    session = None
    token = getattr(request, "auth", None)
    sid = token.get("sid") if token is not None and hasattr(token, "get") else None

    if sid and request.user and request.user.is_authenticated:
        session = (
            AdminSession.objects
            .filter(pk=sid, user=request.user)
            .first()
        )

    request._admin_session = session
    return session


class HasActiveSession(BasePermission):
    message = "Session expired. Please log in again."

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return is_session_active(get_admin_session(request))


class IsAdminOrStaff(HasActiveSession):

    def has_permission(self, request, view):
        return (
            super().has_permission(request, view)
            and request.user.role in ("ADMIN", "STAFF")
        )


class IsAdminRole(HasActiveSession):

    def has_permission(self, request, view):
        return (
            super().has_permission(request, view)
            and request.user.role == "ADMIN"
        )
