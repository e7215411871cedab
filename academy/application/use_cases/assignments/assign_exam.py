"""
시험 배정 Use Case — 학생 목록 또는 그룹 단위

검증 순서 (오류 우선순위 고정):
1) student_ids / group_id 중 정확히 하나
2) 시험 존재 → 소유
3) 그룹: 존재 → 소유 → 멤버 있음 / 학생 목록: 전원 교사 소유
4) 미배정 대상 없음 → ConflictError

배정 생성은 1건당 트랜잭션 1개. 중간 실패 시 앞서 생성된 배정은 유효하다.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from academy.application.ports.events import EventPublisher
from academy.application.ports.unit_of_work import UnitOfWorkFactory
from academy.application.use_cases.common import Clock, publish_safely, utc_now
from academy.domain.assignments.entities import Assignment
from academy.domain.assignments.errors import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from academy.domain.assignments.events import ExamAssigned
from academy.domain.shared.ids import generate_access_token, generate_request_id

logger = logging.getLogger(__name__)

DEFAULT_LINK_BASE_URL = "http://localhost:3000"


@dataclass(frozen=True)
class CreatedAssignment:
    assignment_id: int
    student_id: int
    student_name: str
    student_email: str
    access_token: str
    access_link: str

    def to_dict(self) -> dict:
        return {
            "assignment_id": self.assignment_id,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "student_email": self.student_email,
            "access_token": self.access_token,
            "access_link": self.access_link,
        }


@dataclass
class AssignExamResult:
    assignments: list[CreatedAssignment] = field(default_factory=list)
    skipped_count: int = 0

    @property
    def created_count(self) -> int:
        return len(self.assignments)

    def to_dict(self) -> dict:
        return {
            "assignments": [a.to_dict() for a in self.assignments],
            "created_count": self.created_count,
            "skipped_count": self.skipped_count,
        }


def _dedupe(ids: Iterable[int]) -> list[int]:
    seen: set[int] = set()
    out: list[int] = []
    for i in ids:
        if i in seen:
            continue
        seen.add(i)
        out.append(i)
    return out


class AssignExamService:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        events: Optional[EventPublisher] = None,
        clock: Clock = utc_now,
        token_factory: Callable[[], str] = generate_access_token,
        link_base_url: str = DEFAULT_LINK_BASE_URL,
    ) -> None:
        self._uow_factory = uow_factory
        self._events = events
        self._clock = clock
        self._token_factory = token_factory
        self._link_base_url = (link_base_url or DEFAULT_LINK_BASE_URL).rstrip("/")

    def access_link(self, token: str) -> str:
        return f"{self._link_base_url}/exam/{token}"

    def assign(
        self,
        teacher_id: int,
        exam_id: int,
        student_ids: Optional[list[int]] = None,
        group_id: Optional[int] = None,
    ) -> AssignExamResult:
        has_students = bool(student_ids)
        has_group = group_id is not None
        if has_students == has_group:
            raise InvalidRequestError("Provide either student_ids or group_id, not both")

        request_id = generate_request_id()

        # ---------- 읽기 단계 (검증 + 대상 확정) ----------
        with self._uow_factory() as uow:
            exam = uow.exams.get_exam(exam_id)
            if exam is None:
                raise NotFoundError("Exam not found")
            if not exam.is_owned_by(teacher_id):
                raise ForbiddenError("You do not have permission to assign this exam")

            if has_group:
                group = uow.groups.get(group_id)
                if group is None:
                    raise NotFoundError("Group not found")
                if group.teacher_id != teacher_id:
                    raise ForbiddenError("You do not have permission to assign to this group")
                targets = _dedupe(group.member_ids)
                if not targets:
                    raise InvalidRequestError("Group has no students")
            else:
                targets = _dedupe(student_ids or [])
                owned = uow.students.owned_ids(teacher_id, targets)
                missing = [sid for sid in targets if sid not in owned]
                if missing:
                    raise NotFoundError(
                        "Some students not found or do not belong to you: "
                        + ", ".join(str(m) for m in missing)
                    )

            already = uow.assignments.assigned_student_ids(exam_id, targets)
            pending = [sid for sid in targets if sid not in already]
            if not pending:
                raise ConflictError("All selected students already have this exam assigned")
            students = uow.students.get_many(pending)

        skipped = len(targets) - len(pending)
        result = AssignExamResult(skipped_count=skipped)

        # ---------- 쓰기 단계 (1건 = 1 트랜잭션) ----------
        for sid in pending:
            token = self._token_factory()
            now = self._clock()
            try:
                with self._uow_factory() as uow:
                    created = uow.assignments.create(
                        Assignment(
                            exam_id=exam_id,
                            student_id=sid,
                            access_token=token,
                            assigned_at=now,
                        )
                    )
            except ConflictError:
                # 동시 배정 경쟁에서 진 경우
                logger.info(
                    "[%s] assign skipped (already assigned) exam=%s student=%s",
                    request_id,
                    exam_id,
                    sid,
                )
                result.skipped_count += 1
                continue

            student = students.get(sid)
            result.assignments.append(
                CreatedAssignment(
                    assignment_id=created.id,
                    student_id=sid,
                    student_name=student.full_name if student else "",
                    student_email=student.email if student else "",
                    access_token=created.access_token,
                    access_link=self.access_link(created.access_token),
                )
            )

        logger.info(
            "[%s] exam assigned exam=%s teacher=%s created=%s skipped=%s",
            request_id,
            exam_id,
            teacher_id,
            result.created_count,
            result.skipped_count,
        )
        publish_safely(
            self._events,
            ExamAssigned(
                exam_id=exam_id,
                teacher_id=teacher_id,
                student_count=result.created_count,
                skipped_count=result.skipped_count,
            ),
        )
        return result
