"""
문서 번호 라우트

POST /api/documents/next - 다음 번호 발급
GET /api/documents/preview - 다음 번호 미리보기 (예약하지 않음)
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from core.utils.retry import retry_on_unavailable
from web.dependencies import LedgerServices, get_principal, get_services
from web.models.requests import DocumentAllocateRequest
from web.models.responses import DocumentNumberResponse

router = APIRouter(prefix="/api/documents", tags=["Documents"])


def _to_response(services: LedgerServices, number: str, reserved: bool) -> DocumentNumberResponse:
    parsed = services.sequencer.parse(number)
    return DocumentNumberResponse(
        document_number=number,
        prefix=parsed.prefix,
        scope_code=parsed.scope_code,
        date_code=parsed.date_code,
        sequence=parsed.sequence,
        reserved=reserved,
    )


@router.post("/next", response_model=DocumentNumberResponse, status_code=201)
async def allocate_document_number(
    request: DocumentAllocateRequest,
    principal: str = Depends(get_principal),
    services: LedgerServices = Depends(get_services),
):
    """다음 문서 번호 발급"""
    number = await retry_on_unavailable(
        lambda: services.sequencer.allocate(request.prefix, request.label, request.operation_date)
    )
    return _to_response(services, number, reserved=True)


@router.get("/preview", response_model=DocumentNumberResponse)
async def preview_document_number(
    prefix: str = Query(default="SJ", pattern=r"^[A-Z0-9]+$"),
    label: str | None = Query(default=None),
    operation_date: date | None = Query(default=None),
    services: LedgerServices = Depends(get_services),
):
    """다음 문서 번호 미리보기"""
    number = await services.sequencer.preview(prefix, label, operation_date)
    return _to_response(services, number, reserved=False)
