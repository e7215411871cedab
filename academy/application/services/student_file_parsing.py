"""
학생 명단 파일 파싱 (CSV / XLSX) — 헤더 별칭 매칭, 행 단위 StudentRecord 변환

- 헤더 행 필수. 이름/이메일 컬럼은 필수, 학년/학과는 선택
- 빈 행은 건너뜀
- 이름 또는 이메일이 빠진 데이터 행 → InvalidRequestError("Row N: ...") 로 전체 실패
- 배치 단위 group_ids는 모든 행에 적용
"""
from __future__ import annotations

import csv
import io
import logging
import re
from typing import Any, Iterable, Optional, Union

from academy.domain.assignments.errors import InvalidRequestError
from academy.domain.students.entities import StudentRecord

logger = logging.getLogger(__name__)

# 헤더 별칭 (정규화 후 완전 일치)
HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "full_name": ("fullname", "full_name", "nombre", "name"),
    "email": ("email", "correo", "e-mail"),
    "year": ("year", "año", "anio"),
    "career": ("career", "carrera"),
}

REQUIRED_COLUMNS = ("full_name", "email")

NO_ROWS_MESSAGE = "No valid students found in {source}"


def _normalize_header(label: Any) -> str:
    """앞뒤 공백 제거, 내부 공백 → '_', 소문자."""
    s = str(label or "").strip().lower()
    return re.sub(r"\s+", "_", s)


def build_header_map(header_row: Iterable[Any]) -> dict[str, int]:
    out: dict[str, int] = {}
    for i, cell in enumerate(header_row):
        norm = _normalize_header(cell)
        if not norm:
            continue
        for key, aliases in HEADER_ALIASES.items():
            if key in out:
                continue
            if norm in aliases:
                out[key] = i
                break
    return out


def _cell_str(row: list[Any], col_index: Optional[int]) -> str:
    if col_index is None or col_index >= len(row):
        return ""
    v = row[col_index]
    if v is None:
        return ""
    # 엑셀 숫자 셀 (예: 학년 2 → 2.0)
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    return str(v).strip()


def _is_blank(row: list[Any]) -> bool:
    return all(not str(c or "").strip() for c in row)


def _records_from_rows(
    rows: list[tuple[int, list[Any]]],
    col: dict[str, int],
    group_ids: tuple[int, ...],
    source: str,
) -> list[StudentRecord]:
    """rows: (원본 행 번호, 셀 목록). 필수 값 누락 시 행 번호와 함께 실패."""
    records: list[StudentRecord] = []
    for line_no, row in rows:
        if _is_blank(row):
            continue
        full_name = _cell_str(row, col.get("full_name"))
        email = _cell_str(row, col.get("email"))
        if not full_name or not email:
            raise InvalidRequestError(f"Row {line_no}: fullName and email are required")
        records.append(
            StudentRecord(
                full_name=full_name,
                email=email,
                year=_cell_str(row, col.get("year")) or None,
                career=_cell_str(row, col.get("career")) or None,
                group_ids=group_ids,
            )
        )
    if not records:
        raise InvalidRequestError(NO_ROWS_MESSAGE.format(source=source))
    return records


def _require_columns(col: dict[str, int]) -> None:
    missing = [k for k in REQUIRED_COLUMNS if k not in col]
    if missing:
        raise InvalidRequestError(
            "Missing required columns: " + ", ".join(missing)
            + " (expected headers such as fullName/nombre and email/correo)"
        )


def parse_students_csv(
    content: Union[str, bytes],
    group_ids: Iterable[int] = (),
) -> list[StudentRecord]:
    """CSV 본문 → StudentRecord 목록. 따옴표 필드 지원 (csv 모듈)."""
    if isinstance(content, bytes):
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise InvalidRequestError("CSV file must be UTF-8 encoded")
    else:
        text = content.lstrip("\ufeff")

    reader = csv.reader(io.StringIO(text))
    header: Optional[list[str]] = None
    data: list[tuple[int, list[Any]]] = []
    for row in reader:
        if header is None:
            if _is_blank(row):
                continue
            header = row
            continue
        data.append((reader.line_num, row))

    if header is None:
        raise InvalidRequestError("CSV file is empty")

    col = build_header_map(header)
    _require_columns(col)
    records = _records_from_rows(data, col, tuple(group_ids), "CSV")
    logger.info("student csv parsed rows=%s", len(records))
    return records


def _find_header_row(rows: list[list[Any]]) -> int:
    """필수 컬럼이 모두 있는 첫 행 (상위 10행 스캔)."""
    for i, row in enumerate(rows[:10]):
        if not row:
            continue
        col = build_header_map(row)
        if all(k in col for k in REQUIRED_COLUMNS):
            return i
    return -1


def parse_students_excel(
    source: Union[bytes, Any],
    group_ids: Iterable[int] = (),
) -> list[StudentRecord]:
    """
    XLSX → StudentRecord 목록. 활성 시트만 읽음.
    source: 파일 경로 / 파일 객체 / bytes
    """
    import openpyxl

    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)

    try:
        wb = openpyxl.load_workbook(source, read_only=True, data_only=True)
    except Exception as e:
        logger.warning("student excel open failed: %s", e)
        raise InvalidRequestError("Could not read Excel file (xlsx expected)")

    try:
        ws = wb.active
        if ws is None:
            raise InvalidRequestError("No active sheet")
        rows: list[list[Any]] = []
        for row in ws.iter_rows(values_only=True):
            rows.append(list(row) if row else [])
    finally:
        wb.close()

    if not rows:
        raise InvalidRequestError("Excel file is empty")

    header_idx = _find_header_row(rows)
    if header_idx < 0:
        col = build_header_map(rows[0])
        _require_columns(col)
    else:
        col = build_header_map(rows[header_idx])

    data = [(r + 1, rows[r]) for r in range(header_idx + 1, len(rows))]
    records = _records_from_rows(data, col, tuple(group_ids), "Excel file")
    logger.info("student excel parsed rows=%s header_row=%s", len(records), header_idx + 1)
    return records
