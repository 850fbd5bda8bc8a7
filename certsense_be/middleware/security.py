"""
Request size limiting for certificate uploads and chat payloads.
"""
import logging
from django.conf import settings
from django.http import JsonResponse

logger = logging.getLogger(__name__)


class RequestSizeLimitMiddleware:
    """
    Rejects write requests whose declared body is larger than MAX_UPLOAD_MB.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.max_size = getattr(settings, "MAX_UPLOAD_MB", 10) * 1024 * 1024

    def __call__(self, request):
        if request.method in ['POST', 'PUT', 'PATCH']:
            content_length = request.META.get('CONTENT_LENGTH')

            if content_length:
                try:
                    content_length = int(content_length)
                    if content_length > self.max_size:
                        logger.warning(
                            f"Request size limit exceeded: {content_length} bytes on {request.path}"
                        )
                        return JsonResponse({
                            'error': 'Request too large',
                            'max_size_mb': self.max_size / (1024 * 1024),
                            'your_size_mb': round(content_length / (1024 * 1024), 2)
                        }, status=413)
                except (ValueError, TypeError):
                    # malformed header, let Django deal with it
                    pass

        return self.get_response(request)
