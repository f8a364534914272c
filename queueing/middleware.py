from django.http import JsonResponse

class RetiredEndpointMiddleware:
    """Return 410 for the legacy single-variant ticket endpoints."""
    LEGACY_PREFIXES = ('/api/ticket', '/api/settings')

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path or ''
        if any(path == p or path.startswith(p + '/') for p in self.LEGACY_PREFIXES):
            return JsonResponse(
                {'ok': False, 'error': {'code': 'deprecated', 'message': 'This API is retired. Use /api/bank/* or /api/hospital/* instead.'}},
                status=410
            )
        return self.get_response(request)
