"""
In-memory Unit of Work — 전역 RLock + 스냅샷 rollback
"""
from __future__ import annotations

from typing import Optional

from academy.adapters.db.memory.repositories import (
    MemoryAnswerRepository,
    MemoryAssignmentRepository,
    MemoryExamRepository,
    MemoryGradeRepository,
    MemoryGroupRepository,
    MemoryStudentRepository,
)
from academy.adapters.db.memory.store import MemoryState, MemoryStore


class MemoryUnitOfWork:
    """__enter__에서 락 점유 + 스냅샷, 예외로 빠져나가면 스냅샷 복원."""

    def __init__(self, store: MemoryStore) -> None:
        self._store = store
        self._snapshot: Optional[MemoryState] = None
        self._rollback_only = False
        self.exams = MemoryExamRepository(store)
        self.assignments = MemoryAssignmentRepository(store)
        self.answers = MemoryAnswerRepository(store)
        self.grades = MemoryGradeRepository(store)
        self.students = MemoryStudentRepository(store)
        self.groups = MemoryGroupRepository(store)

    def __enter__(self) -> MemoryUnitOfWork:
        self._store.lock.acquire()
        self._snapshot = self._store.snapshot()
        self._rollback_only = False
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            if (exc_type is not None or self._rollback_only) and self._snapshot is not None:
                self._store.restore(self._snapshot)
        finally:
            self._snapshot = None
            self._store.lock.release()

    def commit(self) -> None:
        # __exit__ 시 자동 반영
        pass

    def rollback(self) -> None:
        self._rollback_only = True
