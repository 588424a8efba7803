"""
리포트 분류 엔진

MovementRecord → 분류(카테고리, 수익/비용, 금액).
순수 함수: 부작용 없음, 같은 입력이면 같은 결과.
거래처/결제 정보는 구조화된 필드(MovementContext)에서만 읽음.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from core.constants import Defaults
from core.domain.catalog import Item
from core.domain.movements import MovementRecord
from core.types import Destination, EntryKind, MovementType, PaymentMethod


# 카테고리 라벨
LABEL_RAW_MATERIAL = "Stok Bahan Baku"
LABEL_FINISHED_GOODS = "Stok Barang Jadi"
LABEL_DISTRIBUTION = "Distribusi untuk {counterpart}"
LABEL_OPNAME_ADJUSTMENT = "Penyesuaian Stok (Opname)"
LABEL_MANUAL_ADJUSTMENT = "Penyesuaian Stok (Manual)"
LABEL_INITIAL_STOCK = "Stok Awal"

DEFAULT_OUTLET = "Outlet Umum"
UNKNOWN_ITEM = "Unknown Item"

# 출처
SOURCE_INCOMING = "Barang Masuk"
SOURCE_DISTRIBUTION = "Distribusi"
SOURCE_OTHER = "Lainnya"


@dataclass(frozen=True)
class ClassifiedMovement:
    """분류된 이동 (리포트 / 내보내기용)"""

    movement_id: int | None
    created_at: datetime | None
    item_id: int
    item_name: str
    quantity: Decimal  # 절대값
    unit: str
    category_label: str
    kind: EntryKind
    amount: Decimal
    source: str
    payment_method: PaymentMethod
    counterpart: str | None
    document_number: str | None


@dataclass(frozen=True)
class ClassificationSummary:
    """분류 합계"""

    income: Decimal
    expense: Decimal
    count: int

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense


def unit_price(
    movement_type: MovementType,
    item: Item | None,
    distribution_margin: Decimal = Defaults.DISTRIBUTION_MARGIN,
) -> Decimal:
    """이동 유형별 단가

    출고는 판매가, 판매가가 없거나 0이면 원가 × 마진. 그 외는 원가.
    """
    if item is None:
        return Decimal("0")
    if movement_type == MovementType.DISTRIBUTION:
        # 판매가 0은 미설정과 동일
        if item.selling_price:
            return item.selling_price
        return item.cost_price * distribution_margin
    return item.cost_price


def classify(
    movement: MovementRecord,
    item: Item | None,
    distribution_margin: Decimal = Defaults.DISTRIBUTION_MARGIN,
) -> ClassifiedMovement:
    """이동 분류

    - purchase: 비용, |q| × 원가
    - distribution: 수익, |q| × 판매가 (없으면 원가 × 마진)
    - 조정 / 기초 재고: 수량 방향에 따라 수익(+) 또는 비용(-), |q| × 원가

    Args:
        movement: 이동 레코드
        item: 품목 (카탈로그에 없으면 None, 금액 0)
        distribution_margin: 판매가 미설정 시 원가 대비 배수

    Returns:
        ClassifiedMovement
    """
    quantity = abs(movement.quantity_change)
    ctx = movement.context
    mtype = movement.movement_type

    if mtype == MovementType.PURCHASE:
        kind = EntryKind.EXPENSE
        source = SOURCE_INCOMING
        if ctx.destination == Destination.FINISHED_GOODS:
            label = LABEL_FINISHED_GOODS
        else:
            label = LABEL_RAW_MATERIAL
    elif mtype == MovementType.DISTRIBUTION:
        kind = EntryKind.INCOME
        source = SOURCE_DISTRIBUTION
        label = LABEL_DISTRIBUTION.format(counterpart=ctx.counterpart or DEFAULT_OUTLET)
    else:
        kind = EntryKind.INCOME if movement.quantity_change > 0 else EntryKind.EXPENSE
        source = SOURCE_OTHER
        if mtype == MovementType.OPNAME_ADJUSTMENT:
            label = LABEL_OPNAME_ADJUSTMENT
        elif mtype == MovementType.INITIAL_STOCK:
            label = LABEL_INITIAL_STOCK
        else:
            label = LABEL_MANUAL_ADJUSTMENT

    return ClassifiedMovement(
        movement_id=movement.id,
        created_at=movement.created_at,
        item_id=movement.item_id,
        item_name=item.name if item else UNKNOWN_ITEM,
        quantity=quantity,
        unit=item.unit if item else "pcs",
        category_label=label,
        kind=kind,
        amount=quantity * unit_price(mtype, item, distribution_margin),
        source=source,
        payment_method=ctx.payment_method or PaymentMethod.CASH,
        counterpart=ctx.counterpart,
        document_number=ctx.document_number,
    )


def summarize(classified: Iterable[ClassifiedMovement]) -> ClassificationSummary:
    """수익 / 비용 합계"""
    income = Decimal("0")
    expense = Decimal("0")
    count = 0
    for entry in classified:
        count += 1
        if entry.kind == EntryKind.INCOME:
            income += entry.amount
        else:
            expense += entry.amount
    return ClassificationSummary(income=income, expense=expense, count=count)
