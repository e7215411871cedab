# apps/api/common/middleware.py
# 뷰에서 미처리 예외 발생 시 500 JSON 반환.
# process_exception 응답은 CorsMiddleware를 거치지 않으므로 여기서 CORS 헤더 추가.
from __future__ import annotations

import logging

from django.conf import settings
from django.http import JsonResponse

from academy.domain.shared.ids import generate_request_id

logger = logging.getLogger(__name__)


def _add_cors_headers_to_response(request, response):
    """
    process_exception 등으로 만든 응답에 CORS 헤더 추가.
    응시 화면(브라우저)이 500 응답 본문도 읽을 수 있도록 함.
    """
    origin = (request.META.get("HTTP_ORIGIN") or "").strip()
    allowed = getattr(settings, "CORS_ALLOWED_ORIGINS", []) or []
    if origin and (origin in allowed or getattr(settings, "CORS_ALLOW_ALL_ORIGINS", False)):
        response["Access-Control-Allow-Origin"] = origin
    elif allowed:
        response["Access-Control-Allow-Origin"] = allowed[0]
    if getattr(settings, "CORS_ALLOW_CREDENTIALS", False):
        response["Access-Control-Allow-Credentials"] = "true"
    return response


class UnhandledExceptionMiddleware:
    """미처리 예외를 500 JSON으로 변환. 로그와 응답에 같은 request_id를 남긴다."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        request_id = generate_request_id()
        logger.exception(
            "[%s] Unhandled exception %s %s: %s",
            request_id,
            request.method,
            request.path,
            exception,
        )
        body = {"detail": "Internal server error", "code": "server_error", "request_id": request_id}
        if settings.DEBUG:
            body["error"] = str(exception)
        resp = JsonResponse(body, status=500)
        return _add_cors_headers_to_response(request, resp)
