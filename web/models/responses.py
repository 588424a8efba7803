"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화.
금액/수량은 정밀도 보존을 위해 문자열.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    version: str = Field(..., description="API 버전")
    database: str = Field(..., description="DB 연결 상태")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")


class MovementResponse(BaseModel):
    """재고 이동 응답"""

    id: int | None = Field(..., description="이동 ID")
    item_id: int = Field(..., description="품목 ID")
    location_id: int = Field(..., description="위치 ID")
    quantity_change: str = Field(..., description="부호 있는 수량 변화")
    movement_type: str = Field(..., description="이동 유형")
    note: str | None = Field(default=None, description="비고")
    reference_id: str | None = Field(default=None, description="참조 ID")
    document_number: str | None = Field(default=None, description="문서 번호")
    counterpart: str | None = Field(default=None, description="거래처")
    payment_method: str | None = Field(default=None, description="결제 방식")
    payment_terms_days: int | None = Field(default=None, description="결제 기한 (일)")
    due_date: str | None = Field(default=None, description="만기일")
    destination: str | None = Field(default=None, description="입고 목적지")
    created_by: str | None = Field(default=None, description="작성자")
    created_at: str | None = Field(default=None, description="기록 시각 (UTC)")


class MovementPageResponse(BaseModel):
    """이동 목록 응답 (페이지)"""

    movements: list[MovementResponse] = Field(default_factory=list, description="이동 목록")
    total: int = Field(..., description="전체 건수")
    limit: int = Field(..., description="페이지 크기")
    offset: int = Field(..., description="오프셋")


class MovementBatchResponse(BaseModel):
    """배치 저장 응답"""

    document_number: str | None = Field(default=None, description="문서 번호")
    movements: list[MovementResponse] = Field(..., description="저장된 이동")


class StockResponse(BaseModel):
    """현재 재고 응답"""

    item_id: int = Field(..., description="품목 ID")
    location_id: int | None = Field(default=None, description="위치 ID (없으면 전체 합계)")
    quantity: str = Field(..., description="현재 재고")


class StockHealthResponse(BaseModel):
    """재고 상태 응답"""

    item_id: int = Field(..., description="품목 ID")
    quantity: str = Field(..., description="현재 재고")
    min_stock: str = Field(..., description="최소 재고")
    health: str = Field(..., description="재고 상태 (habis/menipis/aman)")


class StockStatusResponse(BaseModel):
    """품목별 재고 현황"""

    item_id: int = Field(..., description="품목 ID")
    name: str = Field(..., description="품목명")
    sku: str | None = Field(default=None, description="SKU")
    unit: str = Field(..., description="단위")
    quantity: str = Field(..., description="현재 재고")
    min_stock: str = Field(..., description="최소 재고")
    health: str = Field(..., description="재고 상태")
    value: str = Field(..., description="재고 금액 (수량 × 원가)")


class StockSummaryResponse(BaseModel):
    """재고 요약 응답"""

    items: list[StockStatusResponse] = Field(default_factory=list, description="품목별 현황")
    total_value: str = Field(..., description="전체 재고 금액")
    low_stock_count: int = Field(..., description="부족 품목 수")


class DocumentNumberResponse(BaseModel):
    """문서 번호 응답"""

    document_number: str = Field(..., description="문서 번호")
    prefix: str = Field(..., description="접두사")
    scope_code: str = Field(..., description="범위 코드")
    date_code: str = Field(..., description="날짜 코드 (DDMMYY)")
    sequence: int = Field(..., description="일련번호")
    reserved: bool = Field(..., description="발급(예약) 여부, 미리보기면 false")


class OpnameSessionResponse(BaseModel):
    """실사 세션 응답"""

    id: int = Field(..., description="세션 ID")
    status: str = Field(..., description="상태 (pending/approved)")
    notes: str | None = Field(default=None, description="메모")
    created_by: str | None = Field(default=None, description="작성자")
    created_at: str = Field(..., description="생성 시각")
    approved_by: str | None = Field(default=None, description="승인자")
    approved_at: str | None = Field(default=None, description="승인 시각")


class OpnameLineResponse(BaseModel):
    """실사 라인 응답"""

    item_id: int = Field(..., description="품목 ID")
    location_id: int = Field(..., description="위치 ID")
    system_stock_at_start: str = Field(..., description="시작 시점 시스템 재고")
    physical_count: str | None = Field(default=None, description="실사 수량")
    variance: str | None = Field(default=None, description="차이 (실사 - 시스템)")
    counted_by: str | None = Field(default=None, description="실사자")
    counted_at: str | None = Field(default=None, description="실사 시각")


class OpnameSessionDetailResponse(BaseModel):
    """실사 세션 상세 응답"""

    session: OpnameSessionResponse = Field(..., description="세션")
    lines: list[OpnameLineResponse] = Field(default_factory=list, description="라인 목록")


class OpnameApprovalResponse(BaseModel):
    """실사 승인 응답"""

    session: OpnameSessionResponse = Field(..., description="승인된 세션")
    adjustments: list[MovementResponse] = Field(default_factory=list, description="보정 이동")
    skipped_uncounted: int = Field(..., description="미실사로 생략된 라인 수")
    total_variance: str = Field(..., description="보정 수량 합계")


class OpnameReportRow(BaseModel):
    """실사 이력 행"""

    session_id: int = Field(..., description="세션 ID")
    status: str = Field(..., description="상태")
    created_at: str = Field(..., description="생성 시각")
    approved_at: str | None = Field(default=None, description="승인 시각")
    line_count: int = Field(..., description="라인 수")
    counted_count: int = Field(..., description="실사 완료 라인 수")
    total_variance: str = Field(..., description="차이 수량 합계")
    variance_value: str = Field(..., description="차이 금액 (원가 기준)")


class ClassifiedMovementResponse(BaseModel):
    """분류된 이동 (내보내기용)"""

    movement_id: int | None = Field(..., description="이동 ID")
    created_at: str | None = Field(default=None, description="기록 시각")
    item_id: int = Field(..., description="품목 ID")
    item_name: str = Field(..., description="품목명")
    quantity: str = Field(..., description="수량 (절대값)")
    unit: str = Field(..., description="단위")
    category_label: str = Field(..., description="카테고리")
    kind: str = Field(..., description="income/expense")
    amount: str = Field(..., description="금액")
    source: str = Field(..., description="출처")
    payment_method: str = Field(..., description="결제 방식")
    counterpart: str | None = Field(default=None, description="거래처")
    document_number: str | None = Field(default=None, description="문서 번호")


class ClassifiedReportResponse(BaseModel):
    """분류 리포트 응답"""

    entries: list[ClassifiedMovementResponse] = Field(default_factory=list, description="분류 목록")
    income: str = Field(..., description="수익 합계")
    expense: str = Field(..., description="비용 합계")
    balance: str = Field(..., description="수익 - 비용")
    count: int = Field(..., description="건수")


class ErrorResponse(BaseModel):
    """오류 응답"""

    detail: str = Field(..., description="오류 메시지")
    error: str = Field(..., description="오류 유형")
    context: dict[str, Any] | None = Field(default=None, description="추가 정보")
