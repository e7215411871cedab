"""
Repository 포트 — 영속화 추상화 (Django/ORM 미사용)

트랜잭션 경계(atomic)는 UnitOfWork 어댑터가, 행 잠금/조건부 갱신은 각 Repository 어댑터가 수행.
"""
from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import Any, Iterable, Optional, Protocol

from academy.domain.assignments.entities import Answer, Assignment, AssignmentStatus, Grade
from academy.domain.assignments.questions import ExamDefinition
from academy.domain.shared.patch import Patch
from academy.domain.students.entities import GroupInfo, StudentInfo, StudentRecord


class ExamRepository(Protocol):
    """문제은행/시험 정의 읽기 전용."""

    @abstractmethod
    def get_exam(self, exam_id: int) -> Optional[ExamDefinition]:
        """문항(순서 고정, type_config 디코딩 완료) 포함 시험 정의. 없으면 None."""
        ...


class AssignmentRepository(Protocol):
    """시험 배정. (exam_id, student_id) 유일."""

    @abstractmethod
    def get(self, assignment_id: int, for_update: bool = False) -> Optional[Assignment]:
        """for_update=True면 트랜잭션 내 행 잠금."""
        ...

    @abstractmethod
    def get_by_token(self, access_token: str, for_update: bool = False) -> Optional[Assignment]:
        """유일 인덱스 조회 (선형 탐색 금지)."""
        ...

    @abstractmethod
    def assigned_student_ids(self, exam_id: int, student_ids: Iterable[int]) -> set[int]:
        """student_ids 중 이미 exam_id 배정이 있는 학생."""
        ...

    @abstractmethod
    def create(self, assignment: Assignment) -> Assignment:
        """insert. (exam, student) 중복이면 ConflictError."""
        ...

    @abstractmethod
    def transition(
        self,
        assignment_id: int,
        expected: AssignmentStatus,
        new: AssignmentStatus,
        **fields: Any,
    ) -> bool:
        """
        현재 상태가 expected일 때만 new로 갱신 (compare-and-set).
        fields: started_at / submitted_at / score.
        Returns: 갱신 성공 여부 (경쟁에서 진 호출자는 False).
        """
        ...

    @abstractmethod
    def list_for_teacher(
        self,
        teacher_id: int,
        exam_id: Optional[int] = None,
        student_id: Optional[int] = None,
        status: Optional[AssignmentStatus] = None,
    ) -> list[Assignment]:
        """교사 소유 시험의 배정 목록 (assigned_at 최신순)."""
        ...


class AnswerRepository(Protocol):
    """문항 응답. (assignment_id, question_id) 유일."""

    @abstractmethod
    def upsert(self, answer: Answer, now: datetime) -> Answer:
        """없으면 생성, 있으면 응답 필드 전체 교체 + score/feedback 초기화. 원자적."""
        ...

    @abstractmethod
    def list_by_assignment(self, assignment_id: int) -> list[Answer]:
        ...

    @abstractmethod
    def get(self, answer_id: int) -> Optional[Answer]:
        ...

    @abstractmethod
    def set_score(self, answer_id: int, score: Optional[float]) -> None:
        """자동 채점 점수 기록 (feedback 유지)."""
        ...

    @abstractmethod
    def apply_grade(self, answer_id: int, score: float, feedback: Patch[str]) -> Answer:
        """수동 채점. feedback은 patch 표기 (UNSET이면 유지)."""
        ...


class GradeRepository(Protocol):
    """최종 성적. assignment_id 당 1건."""

    @abstractmethod
    def upsert(self, grade: Grade) -> Grade:
        ...

    @abstractmethod
    def get_by_assignment(self, assignment_id: int) -> Optional[Grade]:
        ...

    @abstractmethod
    def list_for_teacher(
        self,
        teacher_id: int,
        student_id: Optional[int] = None,
        group_id: Optional[int] = None,
        career: Optional[str] = None,
    ) -> list[Grade]:
        """교사 소유 시험의 성적 목록 (graded_at 최신순)."""
        ...


class StudentRepository(Protocol):
    @abstractmethod
    def owned_ids(self, teacher_id: int, student_ids: Iterable[int]) -> set[int]:
        ...

    @abstractmethod
    def get_many(self, student_ids: Iterable[int]) -> dict[int, StudentInfo]:
        ...

    @abstractmethod
    def existing_emails(self, teacher_id: int, emails: Iterable[str]) -> set[str]:
        """소문자 기준 비교. 반환값도 소문자."""
        ...

    @abstractmethod
    def create(self, teacher_id: int, record: StudentRecord) -> StudentInfo:
        """학생 + 그룹 소속 생성. 이메일 중복이면 ConflictError."""
        ...


class GroupRepository(Protocol):
    @abstractmethod
    def get(self, group_id: int) -> Optional[GroupInfo]:
        """멤버 학생 ID 포함."""
        ...

    @abstractmethod
    def owned_ids(self, teacher_id: int, group_ids: Iterable[int]) -> set[int]:
        ...
