"""
Health check for the payroll backend.

GET /api/health is the only public route; the payroll tables live in the
Supabase database, so the check is a round trip to it.
"""
import logging

from django.db import connection
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    """200 when the database answers, 503 with its error otherwise."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
    except Exception as e:
        logger.error(f'Health check database error: {e}')
        return Response(
            {'status': 'unhealthy', 'service': 'payroll-backend', 'database': f'error: {e}'},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return Response({'status': 'healthy', 'service': 'payroll-backend', 'database': 'connected'})
