"""
재고 실사 (Opname)

시스템 재고 스냅샷 → 실사 수량 입력 → 승인 시 차이를 보정 이동으로 기록.
"""

from core.opname.manager import OpnameManager

__all__ = [
    "OpnameManager",
]
