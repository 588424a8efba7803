"""
재고 이동 도메인 모델

모든 재고 변화는 MovementRecord로 기록됨 (append-only ledger).
현재 재고는 저장하지 않고 quantity_change의 합으로 계산.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

from core.types import Destination, MovementType, PaymentMethod
from core.utils.timezone import now_utc


@dataclass(frozen=True)
class MovementContext:
    """이동의 구조화된 부가 정보

    거래처, 결제 조건, 문서 번호 등. 비고(note)는 이 값에서 생성되며
    비고 문자열을 다시 파싱해 값을 복원하지 않음.
    """

    document_number: str | None = None
    counterpart: str | None = None  # 출고: 아울렛, 입고: 공급처
    payment_method: PaymentMethod | None = None
    payment_terms_days: int | None = None
    due_date: date | None = None
    destination: Destination | None = None

    def __post_init__(self) -> None:
        if self.payment_terms_days is not None and self.payment_terms_days < 0:
            raise ValueError(f"payment_terms_days must be >= 0: {self.payment_terms_days}")

    def with_due_date(self, op_date: date) -> "MovementContext":
        """tempo 결제면 op_date + 기한 일수로 due_date 채움"""
        if (
            self.payment_method == PaymentMethod.TEMPO
            and self.payment_terms_days is not None
            and self.due_date is None
        ):
            return replace(self, due_date=op_date + timedelta(days=self.payment_terms_days))
        return self

    @property
    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (
                self.document_number,
                self.counterpart,
                self.payment_method,
                self.payment_terms_days,
                self.due_date,
                self.destination,
            )
        )


def _payment_text(context: MovementContext) -> str | None:
    if context.payment_method is None:
        return None
    text = f"Payment: {context.payment_method.value.upper()}"
    if context.payment_method == PaymentMethod.TEMPO and context.payment_terms_days is not None:
        text += f" ({context.payment_terms_days} days)"
        if context.due_date is not None:
            text += f". Due: {context.due_date.strftime('%d/%m/%Y')}"
    return text


def render_note(
    movement_type: MovementType,
    context: MovementContext,
    remarks: str | None = None,
) -> str | None:
    """구조화된 정보로 사람이 읽는 비고 생성

    Args:
        movement_type: 이동 유형
        context: 구조화된 부가 정보
        remarks: 사용자가 입력한 자유 비고

    Returns:
        비고 문자열 (정보가 전혀 없으면 None)

    Example:
        >>> ctx = MovementContext(document_number="SJ-OUTLE-191026-001", counterpart="Outlet Kemang")
        >>> render_note(MovementType.DISTRIBUTION, ctx)
        'Distribution to: Outlet Kemang. Ref: SJ-OUTLE-191026-001'
    """
    parts: list[str] = []

    if movement_type == MovementType.DISTRIBUTION:
        if context.counterpart:
            parts.append(f"Distribution to: {context.counterpart}")
    elif movement_type == MovementType.PURCHASE:
        head = "[PRODUK JADI]" if context.destination == Destination.FINISHED_GOODS else "[GUDANG]"
        if context.counterpart:
            head += f" Incoming from {context.counterpart}"
        parts.append(head)

    if context.document_number:
        parts.append(f"Ref: {context.document_number}")

    payment = _payment_text(context)
    if payment:
        parts.append(payment)

    if remarks:
        parts.append(remarks.strip())

    if not parts:
        return None
    return ". ".join(parts)


@dataclass(frozen=True)
class MovementRecord:
    """재고 이동 레코드

    저장 후에는 변경 불가. id와 created_at은 Ledger에 기록될 때 확정.
    """

    item_id: int
    location_id: int
    quantity_change: Decimal
    movement_type: MovementType
    note: str | None = None
    reference_id: str | None = None
    context: MovementContext = field(default_factory=MovementContext)
    created_by: str | None = None
    created_at: datetime | None = None
    id: int | None = None  # DB에서 할당

    @staticmethod
    def create(
        item_id: int,
        location_id: int,
        quantity_change: Decimal | int | str,
        movement_type: MovementType | str,
        created_by: str | None = None,
        note: str | None = None,
        reference_id: str | int | None = None,
        context: MovementContext | None = None,
        created_at: datetime | None = None,
    ) -> "MovementRecord":
        """새 이동 레코드 생성

        note를 생략하면 context로부터 생성.

        Args:
            item_id: 품목 ID
            location_id: 위치 ID
            quantity_change: 부호 있는 수량 변화 (0 불가)
            movement_type: 이동 유형
            created_by: 작성자 principal id
            note: 자유 비고
            reference_id: 배치/세션 참조
            context: 구조화된 부가 정보
            created_at: 기록 시각 (None이면 현재, 소급 보정 시 지정)

        Returns:
            새 MovementRecord 인스턴스

        Raises:
            ValueError: quantity_change가 0인 경우
        """
        quantity = quantity_change if isinstance(quantity_change, Decimal) else Decimal(str(quantity_change))
        if quantity == 0:
            raise ValueError("quantity_change must be non-zero")

        mtype = MovementType(movement_type)
        ctx = context or MovementContext()
        if note is None and not ctx.is_empty:
            note = render_note(mtype, ctx)

        return MovementRecord(
            item_id=item_id,
            location_id=location_id,
            quantity_change=quantity,
            movement_type=mtype,
            note=note,
            reference_id=None if reference_id is None else str(reference_id),
            context=ctx,
            created_by=created_by,
            created_at=created_at or now_utc(),
        )

    @property
    def is_debit(self) -> bool:
        """재고 감소 여부"""
        return self.quantity_change < 0

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화용 dict (Decimal은 문자열)"""
        return {
            "id": self.id,
            "item_id": self.item_id,
            "location_id": self.location_id,
            "quantity_change": str(self.quantity_change),
            "movement_type": self.movement_type.value,
            "note": self.note,
            "reference_id": self.reference_id,
            "document_number": self.context.document_number,
            "counterpart": self.context.counterpart,
            "payment_method": self.context.payment_method.value if self.context.payment_method else None,
            "payment_terms_days": self.context.payment_terms_days,
            "due_date": self.context.due_date.isoformat() if self.context.due_date else None,
            "destination": self.context.destination.value if self.context.destination else None,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class MovementFilter:
    """Ledger 조회 조건 (모든 필드는 AND)"""

    item_id: int | None = None
    location_id: int | None = None
    movement_types: tuple[MovementType, ...] | None = None
    reference_id: str | None = None
    document_number: str | None = None
    created_from: datetime | None = None  # 포함
    created_to: datetime | None = None  # 미포함


@dataclass(frozen=True)
class AdminAuthorization:
    """관리자 리셋 승인 정보

    Ledger 행을 지우는 유일한 경로(archive_item_history)에 필수.
    """

    authorized_by: str
    reason: str

    def __post_init__(self) -> None:
        if not self.authorized_by or not self.authorized_by.strip():
            raise ValueError("authorized_by is required")
        if not self.reason or not self.reason.strip():
            raise ValueError("reason is required")
