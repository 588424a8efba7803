"""
core/ledger/classification.py 테스트

이동 → 카테고리 / 수익·비용 / 금액 분류
"""

from dataclasses import replace
from decimal import Decimal

from core.domain.catalog import Item
from core.domain.movements import MovementContext, MovementRecord
from core.ledger.classification import (
    LABEL_FINISHED_GOODS,
    LABEL_INITIAL_STOCK,
    LABEL_MANUAL_ADJUSTMENT,
    LABEL_OPNAME_ADJUSTMENT,
    LABEL_RAW_MATERIAL,
    SOURCE_DISTRIBUTION,
    SOURCE_INCOMING,
    SOURCE_OTHER,
    UNKNOWN_ITEM,
    classify,
    summarize,
    unit_price,
)
from core.types import Destination, EntryKind, MovementType, PaymentMethod

KOPI = Item(id=1, name="Kopi", cost_price=Decimal("1000"), selling_price=Decimal("1500"), unit="kg")
GULA = Item(id=2, name="Gula", cost_price=Decimal("500"))


def movement(quantity: str, mtype: MovementType, item_id: int = 1, **context) -> MovementRecord:
    return MovementRecord.create(item_id, 1, quantity, mtype, context=MovementContext(**context))


class TestUnitPrice:
    """unit_price 테스트"""

    def test_distribution_uses_selling_price(self) -> None:
        assert unit_price(MovementType.DISTRIBUTION, KOPI) == Decimal("1500")

    def test_distribution_falls_back_to_margin(self) -> None:
        assert unit_price(MovementType.DISTRIBUTION, GULA) == Decimal("650.0")
        assert unit_price(MovementType.DISTRIBUTION, GULA, Decimal("2")) == Decimal("1000")

    def test_zero_selling_price_falls_back_to_margin(self) -> None:
        """판매가 0은 미설정으로 취급"""
        unpriced = replace(KOPI, selling_price=Decimal("0"))

        assert unit_price(MovementType.DISTRIBUTION, unpriced) == Decimal("1300.0")

    def test_zero_selling_price_distribution_amount(self) -> None:
        unpriced = replace(KOPI, selling_price=Decimal("0"))

        result = classify(movement("-2", MovementType.DISTRIBUTION), unpriced)

        assert result.kind == EntryKind.INCOME
        assert result.amount == Decimal("2600")

    def test_other_types_use_cost(self) -> None:
        assert unit_price(MovementType.PURCHASE, KOPI) == Decimal("1000")
        assert unit_price(MovementType.OPNAME_ADJUSTMENT, KOPI) == Decimal("1000")

    def test_missing_item(self) -> None:
        assert unit_price(MovementType.PURCHASE, None) == Decimal("0")


class TestClassify:
    """classify 테스트"""

    def test_purchase_raw_material(self) -> None:
        result = classify(movement("10", MovementType.PURCHASE, counterpart="PT Sumber"), KOPI)

        assert result.kind == EntryKind.EXPENSE
        assert result.category_label == LABEL_RAW_MATERIAL
        assert result.source == SOURCE_INCOMING
        assert result.amount == Decimal("10000")
        assert result.payment_method == PaymentMethod.CASH
        assert result.counterpart == "PT Sumber"

    def test_purchase_finished_goods(self) -> None:
        result = classify(
            movement("2", MovementType.PURCHASE, destination=Destination.FINISHED_GOODS),
            KOPI,
        )

        assert result.category_label == LABEL_FINISHED_GOODS

    def test_distribution(self) -> None:
        result = classify(
            movement(
                "-3",
                MovementType.DISTRIBUTION,
                counterpart="Outlet Kemang",
                payment_method=PaymentMethod.TEMPO,
                payment_terms_days=14,
                document_number="SJ-OUKEM-191026-001",
            ),
            KOPI,
        )

        assert result.kind == EntryKind.INCOME
        assert result.category_label == "Distribusi untuk Outlet Kemang"
        assert result.source == SOURCE_DISTRIBUTION
        assert result.quantity == Decimal("3")
        assert result.amount == Decimal("4500")
        assert result.payment_method == PaymentMethod.TEMPO
        assert result.document_number == "SJ-OUKEM-191026-001"

    def test_distribution_without_counterpart(self) -> None:
        result = classify(movement("-1", MovementType.DISTRIBUTION), GULA)

        assert result.category_label == "Distribusi untuk Outlet Umum"
        assert result.amount == Decimal("650.0")

    def test_opname_adjustment_direction(self) -> None:
        gain = classify(movement("2", MovementType.OPNAME_ADJUSTMENT), KOPI)
        loss = classify(movement("-2", MovementType.OPNAME_ADJUSTMENT), KOPI)

        assert gain.kind == EntryKind.INCOME
        assert loss.kind == EntryKind.EXPENSE
        assert gain.category_label == loss.category_label == LABEL_OPNAME_ADJUSTMENT
        assert gain.source == SOURCE_OTHER
        assert loss.amount == Decimal("2000")

    def test_manual_and_initial_labels(self) -> None:
        assert classify(movement("-1", MovementType.MANUAL_ADJUSTMENT), KOPI).category_label == LABEL_MANUAL_ADJUSTMENT
        assert classify(movement("5", MovementType.INITIAL_STOCK), KOPI).category_label == LABEL_INITIAL_STOCK

    def test_unknown_item(self) -> None:
        result = classify(movement("4", MovementType.PURCHASE, item_id=99), None)

        assert result.item_name == UNKNOWN_ITEM
        assert result.amount == Decimal("0")

    def test_pure(self) -> None:
        """같은 입력이면 같은 결과"""
        record = movement("-3", MovementType.DISTRIBUTION, counterpart="Outlet Kemang")

        assert classify(record, KOPI) == classify(record, KOPI)


class TestSummarize:
    """summarize 테스트"""

    def test_totals(self) -> None:
        entries = [
            classify(movement("10", MovementType.PURCHASE), KOPI),  # 비용 10000
            classify(movement("-3", MovementType.DISTRIBUTION), KOPI),  # 수익 4500
            classify(movement("1", MovementType.OPNAME_ADJUSTMENT), KOPI),  # 수익 1000
        ]

        summary = summarize(entries)

        assert summary.income == Decimal("5500")
        assert summary.expense == Decimal("10000")
        assert summary.balance == Decimal("-4500")
        assert summary.count == 3

    def test_empty(self) -> None:
        summary = summarize([])

        assert summary.count == 0
        assert summary.balance == Decimal("0")
