# PATH: apps/api/common/exceptions.py
# DRF EXCEPTION_HANDLER: 도메인 오류(AssignmentDomainError) → JSON 응답
# { "detail", "code" [, "current_state"] } + 매핑된 HTTP status
from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from academy.domain.assignments.errors import AssignmentDomainError

logger = logging.getLogger(__name__)


def domain_exception_handler(exc, context):
    """도메인 오류가 아니면 DRF 기본 핸들러로 넘김 (None이면 미처리 → 500 middleware)."""
    if isinstance(exc, AssignmentDomainError):
        view = context.get("view")
        logger.info(
            "domain error view=%s code=%s status=%s: %s",
            view.__class__.__name__ if view is not None else "-",
            exc.code,
            exc.http_status,
            exc.message,
        )
        response = Response(exc.to_dict(), status=exc.http_status)
        if exc.retryable:
            response["Retry-After"] = "1"
        return response
    return exception_handler(exc, context)
