"""
In-memory Repository 구현 — MemoryUnitOfWork 안에서만 호출 (락 점유 상태)

반환 값은 항상 복사본. 호출자가 엔티티를 바꿔도 저장 상태는 변하지 않는다.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, Optional

from academy.adapters.db.memory.store import MemoryStore
from academy.domain.assignments.entities import Answer, Assignment, AssignmentStatus, Grade
from academy.domain.assignments.errors import ConflictError, NotFoundError
from academy.domain.assignments.questions import ExamDefinition
from academy.domain.shared.patch import apply_patch
from academy.domain.students.entities import GroupInfo, StudentInfo, StudentRecord, normalize_email

_TRANSITION_FIELDS = ("started_at", "submitted_at", "score")


class MemoryExamRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    def get_exam(self, exam_id: int) -> Optional[ExamDefinition]:
        return self._store.state.exams.get(exam_id)


class MemoryAssignmentRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    def get(self, assignment_id: int, for_update: bool = False) -> Optional[Assignment]:
        a = self._store.state.assignments.get(assignment_id)
        return replace(a) if a else None

    def get_by_token(self, access_token: str, for_update: bool = False) -> Optional[Assignment]:
        aid = self._store.state.token_index.get(access_token)
        return self.get(aid) if aid is not None else None

    def assigned_student_ids(self, exam_id: int, student_ids: Iterable[int]) -> set[int]:
        index = self._store.state.pair_index
        return {sid for sid in student_ids if (exam_id, sid) in index}

    def create(self, assignment: Assignment) -> Assignment:
        state = self._store.state
        key = (assignment.exam_id, assignment.student_id)
        if key in state.pair_index:
            raise ConflictError("Student already has this exam assigned")
        if assignment.access_token in state.token_index:
            raise ConflictError("Access token collision")
        aid = state.next_id("assignment")
        saved = replace(assignment, id=aid, status=AssignmentStatus.PENDING)
        state.assignments[aid] = saved
        state.pair_index[key] = aid
        state.token_index[saved.access_token] = aid
        return replace(saved)

    def transition(
        self,
        assignment_id: int,
        expected: AssignmentStatus,
        new: AssignmentStatus,
        **fields: Any,
    ) -> bool:
        unknown = set(fields) - set(_TRANSITION_FIELDS)
        if unknown:
            raise ValueError(f"unsupported transition fields: {sorted(unknown)}")
        state = self._store.state
        current = state.assignments.get(assignment_id)
        if current is None or current.status != expected:
            return False
        state.assignments[assignment_id] = replace(current, status=new, **fields)
        return True

    def list_for_teacher(
        self,
        teacher_id: int,
        exam_id: Optional[int] = None,
        student_id: Optional[int] = None,
        status: Optional[AssignmentStatus] = None,
    ) -> list[Assignment]:
        state = self._store.state
        owned_exams = {eid for eid, e in state.exams.items() if e.teacher_id == teacher_id}
        rows = [
            replace(a)
            for a in state.assignments.values()
            if a.exam_id in owned_exams
            and (exam_id is None or a.exam_id == exam_id)
            and (student_id is None or a.student_id == student_id)
            and (status is None or a.status == status)
        ]
        rows.sort(key=lambda a: (a.assigned_at or datetime.min, a.id or 0), reverse=True)
        return rows


class MemoryAnswerRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    def upsert(self, answer: Answer, now: datetime) -> Answer:
        state = self._store.state
        key = (answer.assignment_id, answer.question_id)
        existing_id = state.answer_index.get(key)
        if existing_id is None:
            aid = state.next_id("answer")
            saved = replace(answer, id=aid, score=None, feedback=None, created_at=now)
            state.answer_index[key] = aid
        else:
            prev = state.answers[existing_id]
            # 행 전체 교체 (score/feedback 초기화, created_at 유지)
            saved = replace(answer, id=existing_id, score=None, feedback=None, created_at=prev.created_at)
        state.answers[saved.id] = saved
        return replace(saved)

    def list_by_assignment(self, assignment_id: int) -> list[Answer]:
        rows = [replace(a) for a in self._store.state.answers.values() if a.assignment_id == assignment_id]
        rows.sort(key=lambda a: a.id or 0)
        return rows

    def get(self, answer_id: int) -> Optional[Answer]:
        a = self._store.state.answers.get(answer_id)
        return replace(a) if a else None

    def set_score(self, answer_id: int, score: Optional[float]) -> None:
        state = self._store.state
        current = state.answers.get(answer_id)
        if current is None:
            raise NotFoundError("Answer not found")
        state.answers[answer_id] = replace(current, score=score)

    def apply_grade(self, answer_id: int, score: float, feedback: Any) -> Answer:
        state = self._store.state
        current = state.answers.get(answer_id)
        if current is None:
            raise NotFoundError("Answer not found")
        updated = replace(current, score=score, feedback=apply_patch(current.feedback, feedback))
        state.answers[answer_id] = updated
        return replace(updated)


class MemoryGradeRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    def upsert(self, grade: Grade) -> Grade:
        state = self._store.state
        prev = state.grades.get(grade.assignment_id)
        gid = prev.id if prev else state.next_id("grade")
        saved = replace(grade, id=gid)
        state.grades[grade.assignment_id] = saved
        return replace(saved)

    def get_by_assignment(self, assignment_id: int) -> Optional[Grade]:
        g = self._store.state.grades.get(assignment_id)
        return replace(g) if g else None

    def list_for_teacher(
        self,
        teacher_id: int,
        student_id: Optional[int] = None,
        group_id: Optional[int] = None,
        career: Optional[str] = None,
    ) -> list[Grade]:
        state = self._store.state
        members: Optional[set[int]] = None
        if group_id is not None:
            group = state.groups.get(group_id)
            members = set(group.member_ids) if group else set()

        out: list[Grade] = []
        for g in state.grades.values():
            a = state.assignments.get(g.assignment_id)
            if a is None:
                continue
            exam = state.exams.get(a.exam_id)
            if exam is None or exam.teacher_id != teacher_id:
                continue
            if student_id is not None and a.student_id != student_id:
                continue
            if members is not None and a.student_id not in members:
                continue
            if career is not None:
                student = state.students.get(a.student_id)
                if student is None or student.career != career:
                    continue
            out.append(replace(g))
        out.sort(key=lambda g: (g.graded_at or datetime.min, g.id or 0), reverse=True)
        return out


class MemoryStudentRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    def owned_ids(self, teacher_id: int, student_ids: Iterable[int]) -> set[int]:
        students = self._store.state.students
        return {
            sid for sid in student_ids
            if sid in students and students[sid].teacher_id == teacher_id
        }

    def get_many(self, student_ids: Iterable[int]) -> dict[int, StudentInfo]:
        students = self._store.state.students
        return {sid: students[sid] for sid in student_ids if sid in students}

    def existing_emails(self, teacher_id: int, emails: Iterable[str]) -> set[str]:
        wanted = {normalize_email(e) for e in emails}
        return {
            normalize_email(s.email)
            for s in self._store.state.students.values()
            if s.teacher_id == teacher_id and normalize_email(s.email) in wanted
        }

    def create(self, teacher_id: int, record: StudentRecord) -> StudentInfo:
        state = self._store.state
        email = normalize_email(record.email)
        if self.existing_emails(teacher_id, [email]):
            raise ConflictError("Student with this email already exists")

        sid = state.next_id("student")
        info = StudentInfo(
            id=sid,
            teacher_id=teacher_id,
            full_name=record.full_name,
            email=email,
            year=record.year,
            career=record.career,
        )
        state.students[sid] = info
        for gid in record.group_ids:
            group = state.groups.get(gid)
            if group is None:
                raise NotFoundError(f"Group not found: {gid}")
            state.groups[gid] = replace(group, member_ids=group.member_ids + (sid,))
        return info


class MemoryGroupRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    def get(self, group_id: int) -> Optional[GroupInfo]:
        return self._store.state.groups.get(group_id)

    def owned_ids(self, teacher_id: int, group_ids: Iterable[int]) -> set[int]:
        groups = self._store.state.groups
        return {
            gid for gid in group_ids
            if gid in groups and groups[gid].teacher_id == teacher_id
        }
