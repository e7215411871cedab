import io

import openpyxl
import pytest

from academy.application.use_cases.students.import_students import (
    DUPLICATE_IN_BATCH_MESSAGE,
    EXISTING_EMAIL_MESSAGE,
)
from academy.domain.assignments.errors import InvalidRequestError, NotFoundError
from academy.domain.students.entities import StudentRecord

from tests.conftest import OTHER_TEACHER_ID, TEACHER_ID


def _emails(store, teacher_id=TEACHER_ID):
    return sorted(s.email for s in store.state.students.values() if s.teacher_id == teacher_id)


def test_batch_with_in_batch_duplicate(importer, store, publisher):
    result = importer.create_batch(
        TEACHER_ID,
        [
            StudentRecord(full_name="Ana Ruiz", email="ana@school.test"),
            StudentRecord(full_name="Ana Again", email="ANA@school.test"),
            StudentRecord(full_name="Ben Ortiz", email="ben@school.test", year="2", career="Physics"),
        ],
    )

    assert result.created == 2
    assert result.failed == 1
    assert result.errors[0].row == 2
    assert result.errors[0].error == DUPLICATE_IN_BATCH_MESSAGE
    assert result.errors[0].email == "ANA@school.test"
    assert _emails(store) == ["ana@school.test", "ben@school.test"]
    assert publisher.names() == ["student_created", "student_created"]


def test_existing_email_is_row_failure(importer, store, students):
    result = importer.create_batch(
        TEACHER_ID,
        [
            StudentRecord(full_name="Repeat", email=" Student1@School.test "),
            StudentRecord(full_name="Fresh", email="fresh@school.test"),
        ],
    )
    assert result.created == 1
    assert result.errors[0].row == 1
    assert result.errors[0].error == EXISTING_EMAIL_MESSAGE


def test_same_email_allowed_for_another_teacher(importer, store, students):
    result = importer.create_batch(
        OTHER_TEACHER_ID, [StudentRecord(full_name="Twin", email="student1@school.test")]
    )
    assert result.created == 1


def test_invalid_rows_do_not_stop_batch(importer):
    result = importer.create_batch(
        TEACHER_ID,
        [
            StudentRecord(full_name="", email="blank@school.test"),
            StudentRecord(full_name="No At", email="no-at-sign"),
            StudentRecord(full_name="Valid", email="valid@school.test"),
        ],
    )
    assert result.created == 1
    assert [e.row for e in result.errors] == [1, 2]
    assert result.errors[0].error == "Full name is required"


def test_empty_batch_rejected(importer):
    with pytest.raises(InvalidRequestError):
        importer.create_batch(TEACHER_ID, [])


def test_unowned_group_fails_whole_batch(importer, store):
    foreign = store.seed_group(OTHER_TEACHER_ID, "Theirs")
    with pytest.raises(NotFoundError) as exc:
        importer.create_batch(
            TEACHER_ID,
            [StudentRecord(full_name="Ana", email="ana@school.test", group_ids=(foreign.id, 999))],
        )
    assert "999" in exc.value.message
    assert _emails(store) == []


def test_group_membership_applied(importer, store):
    group = store.seed_group(TEACHER_ID, "Period 1")
    result = importer.create_batch(
        TEACHER_ID,
        [StudentRecord(full_name="Ana", email="ana@school.test", group_ids=(group.id,))],
    )
    assert store.state.groups[group.id].member_ids == tuple(result.created_ids)


def test_import_csv_end_to_end(importer, store):
    group = store.seed_group(TEACHER_ID, "Period 2")
    content = (
        "Nombre,Correo,Año,Carrera\n"
        '"Ruiz, Ana",ana@school.test,1,Physics\n'
        "Ben Ortiz,ben@school.test,,\n"
    ).encode("utf-8")

    result = importer.import_csv(TEACHER_ID, content, group_ids=[group.id])

    assert result.created == 2
    names = sorted(s.full_name for s in store.state.students.values())
    assert names == ["Ben Ortiz", "Ruiz, Ana"]
    assert len(store.state.groups[group.id].member_ids) == 2


def test_import_excel_end_to_end(importer, store):
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(["fullName", "email", "year"])
    ws.append(["Ana Ruiz", "ana@school.test", 2])
    ws.append(["Ben Ortiz", "ben@school.test", None])
    buf = io.BytesIO()
    wb.save(buf)

    result = importer.import_excel(TEACHER_ID, buf.getvalue())

    assert result.created == 2
    years = {s.email: s.year for s in store.state.students.values()}
    assert years == {"ana@school.test": "2", "ben@school.test": None}
