# accounts/views.py
from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .utils import DEV_USER_EMAIL, current_user_id


@api_view(["POST"])
def current_user(request):
    """
    Development placeholder for the auth sync endpoint.

    Always answers with the development user; nothing is persisted.
    """
    now = timezone.now().isoformat()
    return Response(
        {
            "id": str(current_user_id(request)),
            "email": DEV_USER_EMAIL,
            "createdAt": now,
            "updatedAt": now,
        },
        status=200,
    )
