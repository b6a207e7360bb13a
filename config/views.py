from django.db import connection, DatabaseError
from django.http import JsonResponse


def health_check(request):
    """Liveness probe that also pings the database."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
    except DatabaseError:
        return JsonResponse({'status': 'unavailable', 'database': 'down'}, status=503)

    return JsonResponse({'status': 'ok', 'database': 'up'})


def error_404(request, exception):
    """Custom 404 handler."""
    return JsonResponse({
        'error': 'Not found',
        'status': 404
    }, status=404)


def error_500(request):
    """Custom 500 handler."""
    return JsonResponse({
        'error': 'Internal server error',
        'status': 500
    }, status=500)
