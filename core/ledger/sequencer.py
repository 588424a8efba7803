"""
문서 번호 Sequencer

PREFIX-SCOPECODE-DATECODE-SEQ 형식의 번호 발급.
예: SJ-ARJOG-191026-001 (아울렛 "Artirasa Joglo", 2026-10-19, 첫 번째 출고)

SEQ는 (scope_code, date_code)별 카운터 행에서 원자적으로 증가.
기존 비고를 검색해 최댓값을 찾는 방식은 사용하지 않음.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING

from core.constants import Defaults
from core.errors import InvalidDocumentNumber
from core.utils.timezone import business_date, now_utc

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


# 라벨에 단어가 없을 때의 범위 코드
GENERAL_SCOPE_CODE = "GENRL"
SCOPE_PAD_CHAR = "X"

PREFIX_PATTERN = re.compile(r"^[A-Z0-9]+$")
DOCUMENT_PATTERN = re.compile(
    r"^(?P<prefix>[A-Z0-9]+)-(?P<scope>[A-Z0-9]+)-(?P<date>\d{6})-(?P<seq>\d+)$"
)


def scope_code(label: str | None, width: int = Defaults.SCOPE_CODE_WIDTH) -> str:
    """라벨 → 고정 길이 범위 코드

    - 영숫자/공백 이외 문자 제거 후 대문자
    - 2단어 이상: 1번째 단어 앞 2글자 + 2번째 단어 앞 3글자
    - 1단어: 앞 5글자
    - 단어 없음: GENRL
    - 부족하면 X로 채우고 넘치면 자름

    Example:
        >>> scope_code("Artirasa Joglo")
        'ARJOG'
        >>> scope_code("Kemang")
        'KEMAN'
        >>> scope_code("Li")
        'LIXXX'
    """
    cleaned = re.sub(r"[^A-Za-z0-9\s]", "", label or "").upper()
    words = cleaned.split()

    if len(words) >= 2:
        code = words[0][:2] + words[1][:3]
    elif len(words) == 1:
        code = words[0][:5]
    else:
        code = GENERAL_SCOPE_CODE

    return code.ljust(width, SCOPE_PAD_CHAR)[:width]


def date_code(op_date: date | datetime | None = None, offset_hours: int | None = None) -> str:
    """운영일 → DDMMYY

    datetime은 영업 타임존(WIB) 날짜로 변환 후 사용.
    """
    if op_date is None:
        op_date = now_utc()
    if isinstance(op_date, datetime):
        op_date = business_date(op_date, offset_hours)
    return op_date.strftime("%d%m%y")


@dataclass(frozen=True)
class DocumentNumber:
    """파싱된 문서 번호"""

    prefix: str
    scope_code: str
    date_code: str
    sequence: int
    sequence_width: int = Defaults.SEQUENCE_WIDTH

    @property
    def operation_date(self) -> date:
        return datetime.strptime(self.date_code, "%d%m%y").date()

    def __str__(self) -> str:
        seq = str(self.sequence).zfill(self.sequence_width)
        return f"{self.prefix}-{self.scope_code}-{self.date_code}-{seq}"


class DocumentSequencer:
    """문서 번호 발급기

    Args:
        db: SQLite 어댑터
        sequence_width: SEQ 자릿수
        scope_code_width: 범위 코드 길이
        timezone_offset_hours: DATECODE 기준 UTC 오프셋 (None이면 WIB)
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        sequence_width: int = Defaults.SEQUENCE_WIDTH,
        scope_code_width: int = Defaults.SCOPE_CODE_WIDTH,
        timezone_offset_hours: int | None = None,
    ):
        self.db = db
        self.sequence_width = sequence_width
        self.scope_code_width = scope_code_width
        self.timezone_offset_hours = timezone_offset_hours

    def scope_code(self, label: str | None) -> str:
        return scope_code(label, self.scope_code_width)

    def date_code(self, op_date: date | datetime | None = None) -> str:
        return date_code(op_date, self.timezone_offset_hours)

    def _validate_prefix(self, prefix: str) -> str:
        if not PREFIX_PATTERN.match(prefix or ""):
            raise ValueError(f"Invalid document prefix: {prefix!r}")
        return prefix

    async def allocate(
        self,
        prefix: str,
        label: str | None,
        op_date: date | datetime | None = None,
    ) -> str:
        """다음 번호 발급 (원자적 증가 후 반환)

        Args:
            prefix: 접두사 (SJ, INV)
            label: 범위 라벨 (아울렛/공급처/유형 이름)
            op_date: 운영일 (None이면 오늘)

        Returns:
            발급된 문서 번호

        Raises:
            StorageUnavailable: 일시적 저장소 장애
        """
        self._validate_prefix(prefix)
        scope = self.scope_code(label)
        dcode = self.date_code(op_date)

        async with self.db.transaction():
            # RETURNING 결과는 끝까지 읽어야 커밋 가능 (fetchall)
            rows = await self.db.fetchall(
                """
                INSERT INTO document_sequence (scope_code, date_code, last_value, updated_at)
                VALUES (?, ?, 1, ?)
                ON CONFLICT(scope_code, date_code) DO UPDATE SET
                    last_value = last_value + 1,
                    updated_at = excluded.updated_at
                RETURNING last_value
                """,
                (scope, dcode, now_utc().isoformat()),
            )

        row = rows[0]
        number = DocumentNumber(prefix, scope, dcode, int(row[0]), self.sequence_width)

        logger.info(
            "문서 번호 발급",
            extra={"document_number": str(number), "scope_code": scope, "date_code": dcode},
        )
        return str(number)

    async def preview(
        self,
        prefix: str,
        label: str | None,
        op_date: date | datetime | None = None,
    ) -> str:
        """다음 번호 미리보기 (예약하지 않음, 표시용)"""
        self._validate_prefix(prefix)
        scope = self.scope_code(label)
        dcode = self.date_code(op_date)

        row = await self.db.fetchone(
            "SELECT last_value FROM document_sequence WHERE scope_code = ? AND date_code = ?",
            (scope, dcode),
        )
        next_value = (int(row[0]) if row else 0) + 1
        return str(DocumentNumber(prefix, scope, dcode, next_value, self.sequence_width))

    def parse(self, document_number: str) -> DocumentNumber:
        """문서 번호 파싱

        Raises:
            InvalidDocumentNumber: 형식이 맞지 않는 경우
        """
        match = DOCUMENT_PATTERN.match(document_number.strip())
        if match is None:
            raise InvalidDocumentNumber(f"Invalid document number: {document_number!r}")

        dcode = match.group("date")
        try:
            datetime.strptime(dcode, "%d%m%y")
        except ValueError as e:
            raise InvalidDocumentNumber(f"Invalid date code in {document_number!r}") from e

        return DocumentNumber(
            prefix=match.group("prefix"),
            scope_code=match.group("scope"),
            date_code=dcode,
            sequence=int(match.group("seq")),
            sequence_width=self.sequence_width,
        )
