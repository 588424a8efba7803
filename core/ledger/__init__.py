"""
재고 Ledger

재고 변화를 append-only 이동 기록으로 관리하는 패키지.
현재 재고는 기록을 접어서 계산하며 독립적으로 저장하지 않음.

사용 예시:
```python
from core.ledger import LedgerStore, StockProjector

# 초기화
store = LedgerStore(db)
projector = StockProjector(store)

# 배치 저장 (전부 또는 전무)
await store.append([
    MovementRecord.create(item_id=1, location_id=1, quantity_change=50,
                          movement_type=MovementType.PURCHASE, created_by="u-1"),
])

# 재고 조회
stock = await projector.current_stock(1)
```
"""

from core.ledger.classification import (
    ClassificationSummary,
    ClassifiedMovement,
    classify,
    summarize,
)
from core.ledger.projector import StockProjector, StockStatus, classify_health
from core.ledger.sequencer import (
    DocumentNumber,
    DocumentSequencer,
    date_code,
    scope_code,
)
from core.ledger.store import LedgerStore, MovementQuery

__all__ = [
    # 핵심 클래스
    "LedgerStore",
    "MovementQuery",
    "StockProjector",
    "StockStatus",
    "DocumentSequencer",
    "DocumentNumber",
    # 분류
    "ClassifiedMovement",
    "ClassificationSummary",
    "classify",
    "summarize",
    # 함수
    "classify_health",
    "scope_code",
    "date_code",
]
