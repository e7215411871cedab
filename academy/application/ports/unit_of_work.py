"""
Unit of Work 포트 — 트랜잭션 경계 (Django 미사용)
"""
from __future__ import annotations

from typing import Callable, Protocol

from academy.application.ports.repositories import (
    AnswerRepository,
    AssignmentRepository,
    ExamRepository,
    GradeRepository,
    GroupRepository,
    StudentRepository,
)


class UnitOfWork(Protocol):
    """트랜잭션 단위. __enter__에서 시작, __exit__에서 commit/rollback (예외 시 rollback)."""

    @property
    def exams(self) -> ExamRepository:
        ...

    @property
    def assignments(self) -> AssignmentRepository:
        ...

    @property
    def answers(self) -> AnswerRepository:
        ...

    @property
    def grades(self) -> GradeRepository:
        ...

    @property
    def students(self) -> StudentRepository:
        ...

    @property
    def groups(self) -> GroupRepository:
        ...

    def __enter__(self) -> "UnitOfWork":
        ...

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...


# 연산 1건마다 새 UoW 생성 (요청 간 공유 상태 없음)
UnitOfWorkFactory = Callable[[], UnitOfWork]
