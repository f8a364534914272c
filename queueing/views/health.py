from django.core.cache import cache
from django.db import connections
from django.http import JsonResponse

def healthz(request):
    """Database and cache probe for load balancers."""
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        cache.set('healthz', 1, 5)
        return JsonResponse({'ok': True, 'db': bool(row and row[0] == 1), 'cache': cache.get('healthz') == 1})
    except Exception as e:
        return JsonResponse({'ok': False, 'error': str(e)}, status=500)
