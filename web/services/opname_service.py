"""
실사 서비스

OpnameManager 결과를 응답 스키마로 변환
"""

from core.domain.opname import (
    ApprovalResult,
    OpnameLineSnapshot,
    OpnameScope,
    OpnameSession,
    OpnameSessionReport,
)
from core.errors import SessionNotFound
from core.types import OpnameStatus
from web.dependencies import LedgerServices
from web.models.requests import OpnameCountRequest, OpnameSessionCreateRequest
from web.models.responses import (
    OpnameApprovalResponse,
    OpnameLineResponse,
    OpnameReportRow,
    OpnameSessionDetailResponse,
    OpnameSessionResponse,
)
from web.services.movement_service import movement_to_response


def session_to_response(session: OpnameSession) -> OpnameSessionResponse:
    return OpnameSessionResponse(
        id=session.id,
        status=session.status.value,
        notes=session.notes,
        created_by=session.created_by,
        created_at=session.created_at.isoformat(),
        approved_by=session.approved_by,
        approved_at=session.approved_at.isoformat() if session.approved_at else None,
    )


def line_to_response(line: OpnameLineSnapshot) -> OpnameLineResponse:
    variance = line.variance
    return OpnameLineResponse(
        item_id=line.item_id,
        location_id=line.location_id,
        system_stock_at_start=str(line.system_stock_at_start),
        physical_count=str(line.physical_count) if line.physical_count is not None else None,
        variance=str(variance) if variance is not None else None,
        counted_by=line.counted_by,
        counted_at=line.counted_at.isoformat() if line.counted_at else None,
    )


def report_to_response(row: OpnameSessionReport) -> OpnameReportRow:
    return OpnameReportRow(
        session_id=row.session_id,
        status=row.status.value,
        created_at=row.created_at.isoformat(),
        approved_at=row.approved_at.isoformat() if row.approved_at else None,
        line_count=row.line_count,
        counted_count=row.counted_count,
        total_variance=str(row.total_variance),
        variance_value=str(row.variance_value),
    )


def approval_to_response(result: ApprovalResult) -> OpnameApprovalResponse:
    return OpnameApprovalResponse(
        session=session_to_response(result.session),
        adjustments=[movement_to_response(m) for m in result.adjustments],
        skipped_uncounted=result.skipped_uncounted,
        total_variance=str(result.total_variance),
    )


class OpnameService:
    """실사 서비스

    Args:
        services: 앱 공유 서비스
    """

    def __init__(self, services: LedgerServices):
        self.manager = services.opname

    async def create_session(
        self,
        request: OpnameSessionCreateRequest,
        principal: str,
    ) -> OpnameSessionDetailResponse:
        scope = OpnameScope(
            location_ids=tuple(request.location_ids) if request.location_ids is not None else None,
            category_ids=tuple(request.category_ids) if request.category_ids is not None else None,
            item_ids=tuple(request.item_ids) if request.item_ids is not None else None,
        )
        session = await self.manager.create_session(scope, created_by=principal, notes=request.notes)
        return await self.get_session(session.id)

    async def get_session(self, session_id: int) -> OpnameSessionDetailResponse:
        """세션 상세

        Raises:
            SessionNotFound: 세션 없음
        """
        session = await self.manager.get_session(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        lines = await self.manager.get_lines(session_id)
        return OpnameSessionDetailResponse(
            session=session_to_response(session),
            lines=[line_to_response(line) for line in lines],
        )

    async def list_sessions(self, status: OpnameStatus | None = None, limit: int = 50) -> list[OpnameSessionResponse]:
        sessions = await self.manager.list_sessions(status=status, limit=limit)
        return [session_to_response(s) for s in sessions]

    async def record_count(
        self,
        session_id: int,
        request: OpnameCountRequest,
        principal: str,
    ) -> OpnameLineResponse:
        line = await self.manager.record_count(
            session_id,
            request.item_id,
            request.physical_count,
            counted_by=principal,
            location_id=request.location_id,
        )
        return line_to_response(line)

    async def approve(self, session_id: int, principal: str) -> OpnameApprovalResponse:
        result = await self.manager.approve(session_id, approved_by=principal)
        return approval_to_response(result)

    async def report(self, status: OpnameStatus | None = None) -> list[OpnameReportRow]:
        rows = await self.manager.session_report(status=status)
        return [report_to_response(row) for row in rows]
