from django.utils import timezone


def is_session_active(session, now=None):
    """True while ``session`` is neither revoked nor outside its window."""
    if session is None:
        return False
    if session.revoked_at is not None:
        return False
    now = now or timezone.now()
    return session.issued_at <= now < session.expires_at


def seconds_remaining(session, now=None):
    if not is_session_active(session, now):
        return 0
    now = now or timezone.now()
    return int((session.expires_at - now).total_seconds())
