"""
Students / Group Repository — Django ORM 구현. .objects. 접근을 adapters 내부로 한정.
"""
from __future__ import annotations

from typing import Iterable, Optional

from academy.adapters.db.django.uow import is_unique_violation
from academy.domain.assignments.errors import ConflictError, NotFoundError
from academy.domain.students.entities import GroupInfo, StudentInfo, StudentRecord, normalize_email


def _student_to_info(m) -> StudentInfo:
    return StudentInfo(
        id=m.id,
        teacher_id=m.teacher_id,
        full_name=m.full_name,
        email=m.email,
        year=m.year,
        career=m.career,
    )


class DjangoStudentRepository:
    def owned_ids(self, teacher_id: int, student_ids: Iterable[int]) -> set[int]:
        from apps.domains.students.models import Student

        ids = list(student_ids)
        if not ids:
            return set()
        return set(
            Student.objects.filter(teacher_id=teacher_id, id__in=ids).values_list("id", flat=True)
        )

    def get_many(self, student_ids: Iterable[int]) -> dict[int, StudentInfo]:
        from apps.domains.students.models import Student

        ids = list(student_ids)
        if not ids:
            return {}
        return {m.id: _student_to_info(m) for m in Student.objects.filter(id__in=ids)}

    def existing_emails(self, teacher_id: int, emails: Iterable[str]) -> set[str]:
        from django.db.models.functions import Lower
        from apps.domains.students.models import Student

        wanted = {normalize_email(e) for e in emails if e}
        if not wanted:
            return set()
        return set(
            Student.objects.filter(teacher_id=teacher_id)
            .annotate(email_lower=Lower("email"))
            .filter(email_lower__in=wanted)
            .values_list("email_lower", flat=True)
        )

    def create(self, teacher_id: int, record: StudentRecord) -> StudentInfo:
        """학생 + 그룹 소속을 savepoint 1개로 생성. 이메일 유일 제약 위반 → ConflictError."""
        from django.db import IntegrityError, transaction
        from apps.domains.students.models import Group, GroupMembership, Student

        group_ids = list(dict.fromkeys(record.group_ids))
        try:
            with transaction.atomic():
                m = Student.objects.create(
                    teacher_id=teacher_id,
                    full_name=record.full_name,
                    email=normalize_email(record.email),
                    year=record.year,
                    career=record.career,
                )
                if group_ids:
                    found = set(
                        Group.objects.filter(id__in=group_ids, teacher_id=teacher_id)
                        .values_list("id", flat=True)
                    )
                    missing = [g for g in group_ids if g not in found]
                    if missing:
                        raise NotFoundError(f"Group not found: {missing[0]}")
                    GroupMembership.objects.bulk_create(
                        [GroupMembership(group_id=gid, student_id=m.id) for gid in group_ids]
                    )
        except IntegrityError as e:
            if not is_unique_violation(e, "uniq_student_teacher_email"):
                raise
            raise ConflictError("Student with this email already exists")
        return _student_to_info(m)


class DjangoGroupRepository:
    def get(self, group_id: int) -> Optional[GroupInfo]:
        from apps.domains.students.models import Group, GroupMembership

        g = Group.objects.filter(id=group_id).first()
        if g is None:
            return None
        member_ids = tuple(
            GroupMembership.objects.filter(group_id=g.id)
            .order_by("id")
            .values_list("student_id", flat=True)
        )
        return GroupInfo(id=g.id, teacher_id=g.teacher_id, name=g.name, member_ids=member_ids)

    def owned_ids(self, teacher_id: int, group_ids: Iterable[int]) -> set[int]:
        from apps.domains.students.models import Group

        ids = list(group_ids)
        if not ids:
            return set()
        return set(Group.objects.filter(teacher_id=teacher_id, id__in=ids).values_list("id", flat=True))
