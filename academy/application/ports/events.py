"""
이벤트 발행 포트 — fire-and-forget
"""
from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from academy.domain.assignments.events import DomainEvent


class EventPublisher(Protocol):
    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """실패 시 예외를 던져도 되지만, 호출측은 상태 변경을 되돌리지 않는다."""
        ...
