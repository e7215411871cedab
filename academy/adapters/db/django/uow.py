"""
Django Unit of Work — transaction.atomic 래퍼 (lazy import)

PostgreSQL: 트랜잭션마다 SET LOCAL statement_timeout (ASSIGNMENT_STORE_TIMEOUT_MS).
취소된 statement는 StoreTimeoutError 로 변환 (재시도 여부는 호출자 판단).
"""
from __future__ import annotations

import logging
from typing import Optional

from academy.domain.assignments.errors import StoreTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_STORE_TIMEOUT_MS = 5000

# PostgreSQL SQLSTATE (query_canceled, unique_violation)
_QUERY_CANCELED = "57014"
_UNIQUE_VIOLATION = "23505"


def _is_statement_timeout(exc: BaseException) -> bool:
    from django.db import OperationalError

    if not isinstance(exc, OperationalError):
        return False
    cause = exc.__cause__
    code = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
    if code == _QUERY_CANCELED:
        return True
    text = str(exc).lower()
    return "statement timeout" in text or "canceling statement" in text


def is_unique_violation(exc: BaseException, constraint: str, *columns: str) -> bool:
    """
    지정한 유일 제약 위반인지.
    PostgreSQL: SQLSTATE + diag.constraint_name / SQLite: 메시지(인덱스명 또는 컬럼 목록).
    FK 위반 등 다른 IntegrityError는 False.
    """
    cause = exc.__cause__
    code = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
    text = str(exc)
    if code is not None:
        if code != _UNIQUE_VIOLATION:
            return False
    elif "UNIQUE constraint failed" not in text:
        return False

    name = getattr(getattr(cause, "diag", None), "constraint_name", None)
    if name:
        return name == constraint
    return constraint in text or any(c in text for c in columns)


class DjangoUnitOfWork:
    """Django transaction.atomic으로 트랜잭션 경계. 메서드 내부에서 Django import."""

    def __init__(self, timeout_ms: Optional[int] = None) -> None:
        self._atomic = None
        self._timeout_ms = timeout_ms
        self._exams = None
        self._assignments = None
        self._answers = None
        self._grades = None
        self._students = None
        self._groups = None

    @property
    def exams(self):
        from academy.adapters.db.django.repositories_assignments import DjangoExamRepository
        if self._exams is None:
            self._exams = DjangoExamRepository()
        return self._exams

    @property
    def assignments(self):
        from academy.adapters.db.django.repositories_assignments import DjangoAssignmentRepository
        if self._assignments is None:
            self._assignments = DjangoAssignmentRepository()
        return self._assignments

    @property
    def answers(self):
        from academy.adapters.db.django.repositories_assignments import DjangoAnswerRepository
        if self._answers is None:
            self._answers = DjangoAnswerRepository()
        return self._answers

    @property
    def grades(self):
        from academy.adapters.db.django.repositories_assignments import DjangoGradeRepository
        if self._grades is None:
            self._grades = DjangoGradeRepository()
        return self._grades

    @property
    def students(self):
        from academy.adapters.db.django.repositories_students import DjangoStudentRepository
        if self._students is None:
            self._students = DjangoStudentRepository()
        return self._students

    @property
    def groups(self):
        from academy.adapters.db.django.repositories_students import DjangoGroupRepository
        if self._groups is None:
            self._groups = DjangoGroupRepository()
        return self._groups

    def _timeout(self) -> int:
        if self._timeout_ms is not None:
            return int(self._timeout_ms)
        from django.conf import settings
        return int(getattr(settings, "ASSIGNMENT_STORE_TIMEOUT_MS", DEFAULT_STORE_TIMEOUT_MS))

    def __enter__(self) -> DjangoUnitOfWork:
        from django.db import connection, transaction
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        timeout = self._timeout()
        if connection.vendor == "postgresql" and timeout > 0:
            try:
                with connection.cursor() as cursor:
                    cursor.execute(f"SET LOCAL statement_timeout = {timeout}")
            except BaseException as e:
                self._atomic.__exit__(type(e), e, e.__traceback__)
                self._atomic = None
                raise
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._atomic is not None:
            atomic, self._atomic = self._atomic, None
            atomic.__exit__(exc_type, exc_val, exc_tb)
        if exc_val is not None and _is_statement_timeout(exc_val):
            logger.warning("store statement timeout: %s", exc_val)
            raise StoreTimeoutError("The data store timed out; please retry") from exc_val

    def commit(self) -> None:
        # atomic() 블록 내에서는 명시적 commit 없음; __exit__ 시 자동
        pass

    def rollback(self) -> None:
        from django.db import transaction
        transaction.set_rollback(True)
