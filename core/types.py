"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class MovementType(str, Enum):
    """재고 이동 유형"""

    PURCHASE = "purchase"  # 입고 (매입)
    DISTRIBUTION = "distribution"  # 출고 (아울렛 배송)
    MANUAL_ADJUSTMENT = "manual_adjustment"  # 수동 조정
    OPNAME_ADJUSTMENT = "opname_adjustment"  # 실사 보정
    INITIAL_STOCK = "initial_stock"  # 기초 재고


class StockHealth(str, Enum):
    """재고 상태

    - HABIS: 재고 없음 (stock <= 0)
    - MENIPIS: 부족 (0 < stock <= min_stock)
    - AMAN: 안전
    """

    HABIS = "habis"
    MENIPIS = "menipis"
    AMAN = "aman"


class OpnameStatus(str, Enum):
    """실사 세션 상태"""

    PENDING = "pending"
    APPROVED = "approved"


class UncountedPolicy(str, Enum):
    """승인 시 실사 수량이 없는 라인 처리 정책"""

    SKIP = "skip"  # 차이 없음으로 간주 (이동 미생성)
    REJECT = "reject"  # 승인 거부
    ZERO = "zero"  # 실사 수량 0으로 간주


class EntryKind(str, Enum):
    """리포트 분류 (수익/비용)"""

    INCOME = "income"
    EXPENSE = "expense"


class PaymentMethod(str, Enum):
    """결제 방식"""

    CASH = "cash"
    TEMPO = "tempo"  # 외상 (결제 기한 일수)


class Destination(str, Enum):
    """입고 목적지"""

    WAREHOUSE = "warehouse"  # 원자재 창고
    FINISHED_GOODS = "finished_goods"  # 완제품
