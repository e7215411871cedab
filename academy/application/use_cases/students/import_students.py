"""
학생 일괄 생성 Use Case — 부분 성공(partial success)

- 그룹 소유 검증은 배치 전체 선행 조건 (하나라도 실패 시 아무 행도 만들지 않음)
- 행 단위 트랜잭션. 실패 행은 BatchResult.errors 로 모아 반환
- 이메일은 소문자 기준으로 비교/저장
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence, Union

from academy.application.ports.events import EventPublisher
from academy.application.ports.unit_of_work import UnitOfWorkFactory
from academy.application.services.student_file_parsing import (
    parse_students_csv,
    parse_students_excel,
)
from academy.application.use_cases.common import publish_safely
from academy.domain.assignments.errors import (
    AssignmentDomainError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
)
from academy.domain.assignments.events import StudentCreated
from academy.domain.shared.ids import generate_request_id
from academy.domain.students.entities import (
    BatchResult,
    StudentRecord,
    StudentRowError,
    normalize_email,
)

logger = logging.getLogger(__name__)

EXISTING_EMAIL_MESSAGE = "Student with this email already exists"
DUPLICATE_IN_BATCH_MESSAGE = "Duplicate email in the same batch"


class StudentImportService:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        events: Optional[EventPublisher] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._events = events

    def create_batch(self, teacher_id: int, records: Sequence[StudentRecord]) -> BatchResult:
        if not records:
            raise InvalidRequestError("At least one student is required")

        request_id = generate_request_id()

        # ---------- 배치 선행 조건 ----------
        group_ids = sorted({gid for r in records for gid in r.group_ids})
        with self._uow_factory() as uow:
            if group_ids:
                owned = uow.groups.owned_ids(teacher_id, group_ids)
                invalid = [gid for gid in group_ids if gid not in owned]
                if invalid:
                    raise NotFoundError(
                        "Groups not found or do not belong to you: "
                        + ", ".join(str(g) for g in invalid)
                    )
            existing = uow.students.existing_emails(
                teacher_id, [normalize_email(r.email) for r in records]
            )

        result = BatchResult()
        seen: set[str] = set()

        # ---------- 행 단위 처리 ----------
        for row, record in enumerate(records, start=1):
            email = normalize_email(record.email)

            def fail(message: str) -> None:
                result.record_failed(
                    StudentRowError(
                        row=row,
                        error=message,
                        email=record.email,
                        full_name=record.full_name,
                    )
                )

            if email in existing:
                fail(EXISTING_EMAIL_MESSAGE)
                continue
            if email in seen:
                fail(DUPLICATE_IN_BATCH_MESSAGE)
                continue
            seen.add(email)

            problem = record.validation_error()
            if problem:
                fail(problem)
                continue

            normalized = StudentRecord(
                full_name=record.full_name.strip(),
                email=email,
                year=(record.year or "").strip() or None,
                career=(record.career or "").strip() or None,
                group_ids=tuple(record.group_ids),
            )
            try:
                with self._uow_factory() as uow:
                    student = uow.students.create(teacher_id, normalized)
            except ConflictError:
                # 선행 조회 이후 다른 요청이 같은 이메일로 생성한 경우
                fail(EXISTING_EMAIL_MESSAGE)
                continue
            except AssignmentDomainError as e:
                fail(e.message)
                continue
            except Exception as e:
                logger.warning(
                    "[%s] student batch row=%s email=%r failed: %s",
                    request_id,
                    row,
                    record.email,
                    e,
                    exc_info=True,
                )
                fail(str(e) or e.__class__.__name__)
                continue

            result.record_created(student.id)
            publish_safely(
                self._events,
                StudentCreated(
                    student_id=student.id,
                    teacher_id=teacher_id,
                    full_name=student.full_name,
                    email=student.email,
                ),
            )

        logger.info(
            "[%s] student batch teacher=%s total=%s created=%s failed=%s",
            request_id,
            teacher_id,
            len(records),
            result.created,
            result.failed,
        )
        return result

    def import_csv(
        self,
        teacher_id: int,
        content: Union[str, bytes],
        group_ids: Iterable[int] = (),
    ) -> BatchResult:
        records = parse_students_csv(content, group_ids)
        return self.create_batch(teacher_id, records)

    def import_excel(
        self,
        teacher_id: int,
        source: Any,
        group_ids: Iterable[int] = (),
    ) -> BatchResult:
        records = parse_students_excel(source, group_ids)
        return self.create_batch(teacher_id, records)
