from django.http import JsonResponse
from django.middleware.csrf import get_token
from django.views.decorators.http import require_GET


@require_GET
def csrf(request):
    # sets the 'csrftoken' cookie for the SPA and echoes it back
    return JsonResponse({"csrfToken": get_token(request)})
