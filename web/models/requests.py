"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from core.types import Destination, MovementType, PaymentMethod


class MovementLineRequest(BaseModel):
    """배치 내 이동 한 줄"""

    item_id: int = Field(..., description="품목 ID")
    location_id: int = Field(..., description="위치 ID")
    quantity_change: Decimal = Field(..., description="부호 있는 수량 변화 (0 불가)")
    note: str | None = Field(default=None, description="라인별 비고")


class MovementBatchRequest(BaseModel):
    """이동 배치 저장 요청

    입고/출고/수동 조정 화면에서 한 번에 기록하는 묶음.
    전부 기록되거나 전혀 기록되지 않음.
    """

    movement_type: MovementType = Field(..., description="이동 유형")
    lines: list[MovementLineRequest] = Field(..., min_length=1, description="이동 목록")
    operation_date: date | None = Field(default=None, description="운영일 (문서 번호/만기일 기준)")
    counterpart: str | None = Field(default=None, description="거래처 (출고: 아울렛, 입고: 공급처)")
    document_number: str | None = Field(default=None, description="문서 번호 (미지정 시 자동 발급 가능)")
    allocate_document: bool = Field(default=False, description="문서 번호 자동 발급 여부")
    payment_method: PaymentMethod | None = Field(default=None, description="결제 방식")
    payment_terms_days: int | None = Field(default=None, ge=0, description="tempo 결제 기한 (일)")
    destination: Destination | None = Field(default=None, description="입고 목적지")
    reference_id: str | None = Field(default=None, description="배치 참조 ID")
    notes: str | None = Field(default=None, description="배치 공통 비고")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "movement_type": "distribution",
                    "counterpart": "Artirasa Joglo",
                    "allocate_document": True,
                    "payment_method": "tempo",
                    "payment_terms_days": 14,
                    "lines": [
                        {"item_id": 1, "location_id": 1, "quantity_change": "-12"},
                    ],
                },
            ]
        }
    }


class DocumentAllocateRequest(BaseModel):
    """문서 번호 발급 요청"""

    prefix: str = Field(default="SJ", pattern=r"^[A-Z0-9]+$", description="접두사 (SJ, INV)")
    label: str | None = Field(default=None, description="범위 라벨 (아울렛/공급처 이름)")
    operation_date: date | None = Field(default=None, description="운영일 (미지정 시 오늘)")


class OpnameSessionCreateRequest(BaseModel):
    """실사 세션 생성 요청 (모든 범위 필드 생략 시 전체 활성 품목)"""

    location_ids: list[int] | None = Field(default=None, description="위치 범위")
    category_ids: list[int] | None = Field(default=None, description="카테고리 범위")
    item_ids: list[int] | None = Field(default=None, description="품목 범위")
    notes: str | None = Field(default=None, description="메모")


class OpnameCountRequest(BaseModel):
    """실사 수량 입력 요청"""

    item_id: int = Field(..., description="품목 ID")
    physical_count: Decimal = Field(..., ge=0, description="실사 수량")
    location_id: int | None = Field(default=None, description="위치 ID (여러 위치 라인이면 필수)")
