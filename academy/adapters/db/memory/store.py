"""
In-memory 저장소 — 테스트 / 로컬 실행용 (Django 미사용)

- 프로세스 내 공유 상태 1개 (MemoryStore)
- UoW 1개 = 전역 RLock 1회 점유 (직렬화). 예외 시 스냅샷으로 복원(rollback)
- 유일 제약: (exam_id, student_id), access_token, (assignment_id, question_id),
  grade.assignment_id, (teacher_id, lower(email))
"""
from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from typing import Optional

from academy.domain.assignments.entities import Answer, Assignment, Grade
from academy.domain.assignments.questions import ExamDefinition
from academy.domain.students.entities import GroupInfo, StudentInfo


@dataclass
class MemoryState:
    exams: dict[int, ExamDefinition] = field(default_factory=dict)
    students: dict[int, StudentInfo] = field(default_factory=dict)
    groups: dict[int, GroupInfo] = field(default_factory=dict)
    assignments: dict[int, Assignment] = field(default_factory=dict)
    answers: dict[int, Answer] = field(default_factory=dict)
    grades: dict[int, Grade] = field(default_factory=dict)  # key: assignment_id
    sequences: dict[str, int] = field(default_factory=dict)

    # 인덱스
    token_index: dict[str, int] = field(default_factory=dict)
    pair_index: dict[tuple[int, int], int] = field(default_factory=dict)
    answer_index: dict[tuple[int, int], int] = field(default_factory=dict)

    def next_id(self, name: str) -> int:
        value = self.sequences.get(name, 0) + 1
        self.sequences[name] = value
        return value


class MemoryStore:
    """테스트 fixture가 seed_* 로 시험/학생/그룹을 채운 뒤 uow_factory를 서비스에 주입."""

    def __init__(self) -> None:
        self.state = MemoryState()
        self.lock = threading.RLock()

    # ------------------------------------------------------------------
    # seed (문제은행/학생 관리 쪽 데이터)
    # ------------------------------------------------------------------

    def seed_exam(self, exam: ExamDefinition) -> ExamDefinition:
        with self.lock:
            self.state.exams[exam.exam_id] = exam
        return exam

    def seed_student(
        self,
        teacher_id: int,
        full_name: str,
        email: str,
        *,
        year: Optional[str] = None,
        career: Optional[str] = None,
    ) -> StudentInfo:
        with self.lock:
            sid = self.state.next_id("student")
            info = StudentInfo(
                id=sid,
                teacher_id=teacher_id,
                full_name=full_name,
                email=email.strip().lower(),
                year=year,
                career=career,
            )
            self.state.students[sid] = info
        return info

    def seed_group(self, teacher_id: int, name: str, member_ids: tuple[int, ...] = ()) -> GroupInfo:
        with self.lock:
            gid = self.state.next_id("group")
            group = GroupInfo(id=gid, teacher_id=teacher_id, name=name, member_ids=tuple(member_ids))
            self.state.groups[gid] = group
        return group

    # ------------------------------------------------------------------
    # transaction support
    # ------------------------------------------------------------------

    def snapshot(self) -> MemoryState:
        return copy.deepcopy(self.state)

    def restore(self, snapshot: MemoryState) -> None:
        self.state = snapshot

    def uow_factory(self):
        from academy.adapters.db.memory.uow import MemoryUnitOfWork

        return lambda: MemoryUnitOfWork(self)
