"""
공통 API 뷰
"""
import logging

from django.db import connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health_check(request):
    """
    헬스체크 엔드포인트 (로드밸런서용, 인증 없음)

    Returns:
        - 200: DB 연결 정상
        - 503: DB 연결 실패
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except Exception as e:
        logger.warning("health check failed: %s", e)
        return JsonResponse(
            {"status": "unhealthy", "service": "academy-exams", "database": "disconnected"},
            status=503,
        )
    return JsonResponse(
        {"status": "healthy", "service": "academy-exams", "database": "connected"},
        status=200,
    )
