"""
리포트 서비스

Ledger 이동을 분류(수익/비용)하여 내보내기용으로 제공
"""

from core.domain.movements import MovementFilter
from core.ledger.classification import ClassifiedMovement, classify, summarize
from web.dependencies import LedgerServices
from web.models.responses import ClassifiedMovementResponse, ClassifiedReportResponse


def classified_to_response(entry: ClassifiedMovement) -> ClassifiedMovementResponse:
    return ClassifiedMovementResponse(
        movement_id=entry.movement_id,
        created_at=entry.created_at.isoformat() if entry.created_at else None,
        item_id=entry.item_id,
        item_name=entry.item_name,
        quantity=str(entry.quantity),
        unit=entry.unit,
        category_label=entry.category_label,
        kind=entry.kind.value,
        amount=str(entry.amount),
        source=entry.source,
        payment_method=entry.payment_method.value,
        counterpart=entry.counterpart,
        document_number=entry.document_number,
    )


class ReportService:
    """리포트 서비스

    Args:
        services: 앱 공유 서비스
    """

    def __init__(self, services: LedgerServices):
        self.services = services

    async def classified(self, movement_filter: MovementFilter) -> ClassifiedReportResponse:
        """조건에 맞는 이동 전체를 분류

        Ledger 조회는 keyset 페이지 단위로 스트리밍.
        """
        movements = await self.services.store.query(movement_filter).to_list()
        items = await self.services.catalog.get_items(sorted({m.item_id for m in movements}))
        margin = self.services.config.distribution_margin

        entries = [classify(m, items.get(m.item_id), margin) for m in movements]
        summary = summarize(entries)

        return ClassifiedReportResponse(
            entries=[classified_to_response(e) for e in entries],
            income=str(summary.income),
            expense=str(summary.expense),
            balance=str(summary.balance),
            count=summary.count,
        )
