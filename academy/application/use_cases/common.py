"""
Use Case 공통: 시계 / 이벤트 발행 헬퍼 (Django 미사용)
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from academy.application.ports.events import EventPublisher
from academy.domain.assignments.events import DomainEvent

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def publish_safely(publisher: Optional[EventPublisher], event: DomainEvent) -> None:
    """커밋 이후 호출. 발행 실패는 경고 로그만 남기고 상태 변경은 유지."""
    if publisher is None:
        return
    try:
        publisher.publish(event)
    except Exception:
        logger.warning("event publish failed: %s", event.name, exc_info=True)
