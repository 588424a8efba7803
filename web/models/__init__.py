"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    DocumentAllocateRequest,
    MovementBatchRequest,
    MovementLineRequest,
    OpnameCountRequest,
    OpnameSessionCreateRequest,
)
from web.models.responses import (
    ClassifiedMovementResponse,
    ClassifiedReportResponse,
    DocumentNumberResponse,
    ErrorResponse,
    HealthResponse,
    MovementBatchResponse,
    MovementPageResponse,
    MovementResponse,
    OpnameApprovalResponse,
    OpnameLineResponse,
    OpnameReportRow,
    OpnameSessionDetailResponse,
    OpnameSessionResponse,
    StockHealthResponse,
    StockResponse,
    StockStatusResponse,
    StockSummaryResponse,
)

__all__ = [
    # Requests
    "DocumentAllocateRequest",
    "MovementBatchRequest",
    "MovementLineRequest",
    "OpnameCountRequest",
    "OpnameSessionCreateRequest",
    # Responses
    "ClassifiedMovementResponse",
    "ClassifiedReportResponse",
    "DocumentNumberResponse",
    "ErrorResponse",
    "HealthResponse",
    "MovementBatchResponse",
    "MovementPageResponse",
    "MovementResponse",
    "OpnameApprovalResponse",
    "OpnameLineResponse",
    "OpnameReportRow",
    "OpnameSessionDetailResponse",
    "OpnameSessionResponse",
    "StockHealthResponse",
    "StockResponse",
    "StockStatusResponse",
    "StockSummaryResponse",
]
