import io

import openpyxl
import pytest

from academy.application.services.student_file_parsing import (
    build_header_map,
    parse_students_csv,
    parse_students_excel,
)
from academy.domain.assignments.errors import InvalidRequestError


def _xlsx(rows):
    wb = openpyxl.Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def test_header_aliases():
    col = build_header_map(["  Full Name ", "E-mail", "anio", "CARRERA", "notes"])
    assert col == {"full_name": 0, "email": 1, "year": 2, "career": 3}


def test_csv_quoted_fields_and_blank_lines():
    content = (
        "\ufefffullName,email,career\n"
        '"Ortiz, Ben",ben@school.test,"Physics, applied"\n'
        "\n"
        "Ana,ana@school.test,\n"
    )
    records = parse_students_csv(content, group_ids=[3])

    assert [r.full_name for r in records] == ["Ortiz, Ben", "Ana"]
    assert records[0].career == "Physics, applied"
    assert records[1].career is None
    assert records[0].group_ids == (3,)


def test_csv_bytes_with_bom():
    records = parse_students_csv("\ufeffname,correo\nAna,ana@school.test\n".encode("utf-8"))
    assert records[0].email == "ana@school.test"


def test_csv_row_missing_email_reports_line():
    content = "name,email\nAna,ana@school.test\nBen,\n"
    with pytest.raises(InvalidRequestError) as exc:
        parse_students_csv(content)
    assert exc.value.message == "Row 3: fullName and email are required"


def test_csv_missing_columns():
    with pytest.raises(InvalidRequestError) as exc:
        parse_students_csv("name,phone\nAna,555\n")
    assert "email" in exc.value.message


def test_csv_header_only():
    with pytest.raises(InvalidRequestError) as exc:
        parse_students_csv("name,email\n")
    assert exc.value.message == "No valid students found in CSV"


def test_csv_not_utf8():
    with pytest.raises(InvalidRequestError):
        parse_students_csv("name,email\nJos\xe9,j@school.test\n".encode("latin-1"))


def test_excel_header_below_title_rows():
    content = _xlsx(
        [
            ["Class roster"],
            [],
            ["Nombre", "Correo", "Año"],
            ["Ana", "ana@school.test", 1.0],
            [None, None, None],
            ["Ben", "ben@school.test", "3rd"],
        ]
    )
    records = parse_students_excel(content, group_ids=(7,))

    assert [r.email for r in records] == ["ana@school.test", "ben@school.test"]
    assert records[0].year == "1"
    assert records[1].year == "3rd"
    assert records[1].group_ids == (7,)


def test_excel_row_error_uses_sheet_row_number():
    content = _xlsx([["name", "email"], ["Ana", "ana@school.test"], ["", "ghost@school.test"]])
    with pytest.raises(InvalidRequestError) as exc:
        parse_students_excel(content)
    assert exc.value.message.startswith("Row 3:")


def test_excel_missing_columns_and_garbage():
    with pytest.raises(InvalidRequestError):
        parse_students_excel(_xlsx([["name", "phone"], ["Ana", "555"]]))
    with pytest.raises(InvalidRequestError):
        parse_students_excel(b"not a workbook")
