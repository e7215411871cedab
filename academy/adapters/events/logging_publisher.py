"""
도메인 이벤트 → 로그 (best-effort). 외부 브로커 연동 전까지의 기본 발행자.
"""
from __future__ import annotations

import json
import logging

from academy.domain.assignments.events import DomainEvent

logger = logging.getLogger("academy.events")


class LoggingEventPublisher:
    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    def publish(self, event: DomainEvent) -> None:
        logger.log(
            self._level,
            "event=%s payload=%s",
            event.name,
            json.dumps(event.to_dict(), default=str, ensure_ascii=False),
        )
