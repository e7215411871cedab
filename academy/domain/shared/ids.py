"""
도메인 공통: ID / 접근 토큰 생성 (외부 라이브러리 없음)

접근 토큰(access token)은 응시자가 시험 1건에 접근할 수 있는 유일한 자격 증명.
32바이트 CSPRNG → hex 64자. 생성 후 회전(rotate)하지 않음.
"""
from __future__ import annotations

import re
import secrets
import uuid
from typing import Callable

ACCESS_TOKEN_BYTES = 32
ACCESS_TOKEN_LENGTH = ACCESS_TOKEN_BYTES * 2

_TOKEN_RE = re.compile(r"^[0-9a-f]{%d}$" % ACCESS_TOKEN_LENGTH)

TokenFactory = Callable[[], str]


def generate_request_id() -> str:
    """로그/추적용 짧은 요청 ID."""
    return str(uuid.uuid4())[:8]


def generate_access_token(randbytes: Callable[[int], bytes] = secrets.token_bytes) -> str:
    """
    배정(Assignment) 1건당 1회 발급되는 capability 토큰.
    randbytes는 테스트에서 고정 난수원을 주입할 때만 바꾼다.
    """
    return randbytes(ACCESS_TOKEN_BYTES).hex()


def is_well_formed_token(value: object) -> bool:
    """소문자 hex 64자만 허용. 형식 불일치는 저장소 조회 전에 걸러낸다."""
    return isinstance(value, str) and bool(_TOKEN_RE.fullmatch(value))
