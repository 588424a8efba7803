"""
도메인 예외 정의

Ledger / Projection / Opname / Sequencer에서 발생하는 예외.
저장소 레벨 오류(sqlite3)는 어댑터 경계에서 이 예외로 변환됨.
"""


class StockLedgerError(Exception):
    """모든 도메인 예외의 기본 클래스"""
    pass


class ConstraintViolation(StockLedgerError):
    """참조 무결성 위반 (존재하지 않는 item / location)

    배치 전체가 중단되며 어떤 행도 기록되지 않음.
    """
    pass


class StorageUnavailable(StockLedgerError):
    """일시적 저장소 장애 (busy, locked, I/O)

    호출자가 재시도 가능.
    """
    pass


class ItemNotFound(StockLedgerError):
    """카탈로그에 없는 품목"""

    def __init__(self, item_id: int):
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id


class SessionNotFound(StockLedgerError):
    """존재하지 않는 실사 세션"""

    def __init__(self, session_id: int):
        super().__init__(f"Opname session not found: {session_id}")
        self.session_id = session_id


class SessionNotPending(StockLedgerError):
    """pending 상태가 아닌 세션에 대한 변경 시도"""

    def __init__(self, session_id: int, status: str):
        super().__init__(
            f"Opname session {session_id} is not pending (status: {status})"
        )
        self.session_id = session_id
        self.status = status


class OpnameLineNotFound(StockLedgerError):
    """세션에 해당 품목/위치 스냅샷이 없음"""

    def __init__(self, session_id: int, item_id: int, location_id: int | None = None):
        where = f"item {item_id}" if location_id is None else f"item {item_id} @ location {location_id}"
        super().__init__(f"Opname session {session_id} has no line for {where}")
        self.session_id = session_id
        self.item_id = item_id
        self.location_id = location_id


class UncountedLinesError(StockLedgerError):
    """reject 정책에서 실사 수량이 없는 라인이 남아 있음"""

    def __init__(self, session_id: int, uncounted: int):
        super().__init__(
            f"Opname session {session_id} has {uncounted} uncounted line(s)"
        )
        self.session_id = session_id
        self.uncounted = uncounted


class InvalidDocumentNumber(StockLedgerError):
    """문서 번호 형식 오류"""
    pass
