"""
실사(Opname) 도메인 모델

세션 시작 시 시스템 재고를 스냅샷으로 고정하고,
실사 수량과의 차이(variance)를 보정 이동으로 기록.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from core.domain.movements import MovementRecord
from core.types import OpnameStatus


@dataclass(frozen=True)
class OpnameScope:
    """실사 대상 범위

    모든 필드가 None이면 전체 활성 품목.
    """

    location_ids: tuple[int, ...] | None = None
    category_ids: tuple[int, ...] | None = None
    item_ids: tuple[int, ...] | None = None


@dataclass(frozen=True)
class OpnameSession:
    """실사 세션"""

    id: int
    status: OpnameStatus
    created_at: datetime
    created_by: str | None = None
    notes: str | None = None
    approved_at: datetime | None = None
    approved_by: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == OpnameStatus.PENDING


@dataclass(frozen=True)
class OpnameLineSnapshot:
    """실사 라인 스냅샷

    system_stock_at_start는 세션 생성 시 한 번만 계산되며 이후 재계산하지 않음.
    """

    session_id: int
    item_id: int
    location_id: int
    system_stock_at_start: Decimal
    physical_count: Decimal | None = None
    counted_by: str | None = None
    counted_at: datetime | None = None

    @property
    def is_counted(self) -> bool:
        return self.physical_count is not None

    @property
    def variance(self) -> Decimal | None:
        """실사 수량 - 시작 시점 재고 (미실사면 None)"""
        if self.physical_count is None:
            return None
        return self.physical_count - self.system_stock_at_start


@dataclass(frozen=True)
class ApprovalResult:
    """세션 승인 결과"""

    session: OpnameSession
    adjustments: list[MovementRecord] = field(default_factory=list)
    skipped_uncounted: int = 0

    @property
    def total_variance(self) -> Decimal:
        return sum((m.quantity_change for m in self.adjustments), Decimal("0"))


@dataclass(frozen=True)
class OpnameSessionReport:
    """실사 이력 리포트 행 (세션별 합계)"""

    session_id: int
    status: OpnameStatus
    created_at: datetime
    approved_at: datetime | None
    line_count: int
    counted_count: int
    total_variance: Decimal
    variance_value: Decimal  # 차이 수량 × 원가
