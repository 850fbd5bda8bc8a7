import uuid

DEMO_COOKIE_NAME = "demo_user_id"
DEV_USER_EMAIL = "dev@example.com"

# Stable id for the placeholder development user
DEV_USER_ID = uuid.uuid5(uuid.NAMESPACE_URL, "certsense:dev-user-id")


def _demo_user_id(request):
    try:
        v = request.COOKIES.get(DEMO_COOKIE_NAME)
        return uuid.UUID(v) if v else None
    except (ValueError, TypeError):
        return None


def current_user_id(request) -> uuid.UUID:
    """
    Owner id for rows created by this request.

    Authentication is a placeholder: an authenticated Django user maps onto a
    deterministic UUID, a demo cookie is honoured, everyone else is the
    development user.
    """
    user = getattr(request, "user", None)
    if user is not None and getattr(user, "is_authenticated", False):
        try:
            return uuid.UUID(str(user.pk))
        except ValueError:
            return uuid.uuid5(uuid.NAMESPACE_URL, f"certsense:user:{user.pk}")
    return _demo_user_id(request) or DEV_USER_ID
