"""
실사(Opname) 라우트

POST /api/opname/sessions - 세션 생성 (스냅샷)
GET /api/opname/sessions - 세션 목록
GET /api/opname/sessions/{session_id} - 세션 상세
PUT /api/opname/sessions/{session_id}/counts - 실사 수량 입력
POST /api/opname/sessions/{session_id}/approve - 승인
GET /api/opname/report - 실사 이력 리포트
"""

from fastapi import APIRouter, Depends, Query

from core.types import OpnameStatus
from web.dependencies import LedgerServices, get_principal, get_services
from web.models.requests import OpnameCountRequest, OpnameSessionCreateRequest
from web.models.responses import (
    OpnameApprovalResponse,
    OpnameLineResponse,
    OpnameReportRow,
    OpnameSessionDetailResponse,
    OpnameSessionResponse,
)
from web.services.opname_service import OpnameService

router = APIRouter(prefix="/api/opname", tags=["Opname"])


@router.post("/sessions", response_model=OpnameSessionDetailResponse, status_code=201)
async def create_session(
    request: OpnameSessionCreateRequest,
    principal: str = Depends(get_principal),
    services: LedgerServices = Depends(get_services),
):
    """실사 세션 생성"""
    return await OpnameService(services).create_session(request, principal)


@router.get("/sessions", response_model=list[OpnameSessionResponse])
async def list_sessions(
    status: OpnameStatus | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
    services: LedgerServices = Depends(get_services),
):
    """실사 세션 목록 (최신순)"""
    return await OpnameService(services).list_sessions(status, limit)


@router.get("/sessions/{session_id}", response_model=OpnameSessionDetailResponse)
async def get_session(
    session_id: int,
    services: LedgerServices = Depends(get_services),
):
    """실사 세션 상세 (라인 포함)"""
    return await OpnameService(services).get_session(session_id)


@router.put("/sessions/{session_id}/counts", response_model=OpnameLineResponse)
async def record_count(
    session_id: int,
    request: OpnameCountRequest,
    principal: str = Depends(get_principal),
    services: LedgerServices = Depends(get_services),
):
    """실사 수량 입력"""
    return await OpnameService(services).record_count(session_id, request, principal)


@router.post("/sessions/{session_id}/approve", response_model=OpnameApprovalResponse)
async def approve_session(
    session_id: int,
    principal: str = Depends(get_principal),
    services: LedgerServices = Depends(get_services),
):
    """실사 세션 승인 (보정 이동 기록)"""
    return await OpnameService(services).approve(session_id, principal)


@router.get("/report", response_model=list[OpnameReportRow])
async def opname_report(
    status: OpnameStatus | None = Query(default=None),
    services: LedgerServices = Depends(get_services),
):
    """실사 이력 리포트"""
    return await OpnameService(services).report(status)
