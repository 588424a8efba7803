"""
재고 이동 서비스

배치 저장 (문서 번호 발급 포함) 및 Ledger 조회
"""

import logging
from datetime import datetime
from decimal import Decimal

from core.constants import DocumentPrefix
from core.domain.movements import MovementContext, MovementFilter, MovementRecord, render_note
from core.errors import ItemNotFound
from core.types import MovementType
from core.utils.retry import retry_on_unavailable
from core.utils.timezone import business_date
from web.dependencies import LedgerServices
from web.models.requests import MovementBatchRequest
from web.models.responses import MovementBatchResponse, MovementPageResponse, MovementResponse

logger = logging.getLogger(__name__)


# 이동 유형별 자동 발급 접두사
DOCUMENT_PREFIXES: dict[MovementType, str] = {
    MovementType.DISTRIBUTION: DocumentPrefix.SURAT_JALAN,
    MovementType.PURCHASE: DocumentPrefix.INVOICE,
}


def movement_to_response(movement: MovementRecord) -> MovementResponse:
    """MovementRecord → 응답 스키마"""
    return MovementResponse(**movement.to_dict())


class MovementService:
    """재고 이동 서비스

    Args:
        services: 앱 공유 서비스
    """

    def __init__(self, services: LedgerServices):
        self.services = services

    async def list_movements(
        self,
        movement_filter: MovementFilter,
        limit: int = 50,
        offset: int = 0,
    ) -> MovementPageResponse:
        """이동 목록 (시간 오름차순, 페이지)"""
        query = self.services.store.query(movement_filter)
        movements = await query.page(limit=limit, offset=offset)
        total = await query.count()

        return MovementPageResponse(
            movements=[movement_to_response(m) for m in movements],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def post_batch(self, request: MovementBatchRequest, principal: str) -> MovementBatchResponse:
        """이동 배치 저장

        allocate_document이면 유형별 접두사로 문서 번호를 먼저 발급.
        재고 충분 여부는 검사하지 않음 (호출 워크플로 책임).

        Raises:
            ItemNotFound: 카탈로그에 없는 품목
            ValueError: 자동 발급을 지원하지 않는 유형
            ConstraintViolation: 존재하지 않는 위치 등 참조 오류
        """
        items = await self.services.catalog.get_items([line.item_id for line in request.lines])
        for line in request.lines:
            if line.item_id not in items:
                raise ItemNotFound(line.item_id)

        op_date = request.operation_date or business_date(
            offset_hours=self.services.config.timezone_offset_hours
        )

        document_number = request.document_number
        if document_number is None and request.allocate_document:
            prefix = DOCUMENT_PREFIXES.get(request.movement_type)
            if prefix is None:
                raise ValueError(
                    f"Document numbers are not issued for {request.movement_type.value} batches"
                )
            label = request.counterpart or request.movement_type.value
            document_number = await retry_on_unavailable(
                lambda: self.services.sequencer.allocate(prefix, label, op_date)
            )

        context = MovementContext(
            document_number=document_number,
            counterpart=request.counterpart,
            payment_method=request.payment_method,
            payment_terms_days=request.payment_terms_days,
            destination=request.destination,
        ).with_due_date(op_date)

        batch_note = render_note(request.movement_type, context, request.notes)
        batch: list[MovementRecord] = []
        for line in request.lines:
            note = batch_note
            if line.note:
                note = f"{batch_note} [Item Note: {line.note}]" if batch_note else line.note
            batch.append(
                MovementRecord.create(
                    item_id=line.item_id,
                    location_id=line.location_id,
                    quantity_change=Decimal(line.quantity_change),
                    movement_type=request.movement_type,
                    created_by=principal,
                    note=note,
                    reference_id=request.reference_id or document_number,
                    context=context,
                )
            )

        saved = await retry_on_unavailable(lambda: self.services.store.append(batch))

        logger.info(
            "Web: 이동 배치 처리",
            extra={
                "movement_type": request.movement_type.value,
                "lines": len(saved),
                "document_number": document_number,
                "principal": principal,
            },
        )

        return MovementBatchResponse(
            document_number=document_number,
            movements=[movement_to_response(m) for m in saved],
        )


def build_filter(
    item_id: int | None = None,
    location_id: int | None = None,
    movement_types: list[MovementType] | None = None,
    reference_id: str | None = None,
    document_number: str | None = None,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
) -> MovementFilter:
    """쿼리 파라미터 → MovementFilter"""
    return MovementFilter(
        item_id=item_id,
        location_id=location_id,
        movement_types=tuple(movement_types) if movement_types else None,
        reference_id=reference_id,
        document_number=document_number,
        created_from=created_from,
        created_to=created_to,
    )
