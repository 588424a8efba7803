"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.

Projection 캐시와 세션별 승인 잠금은 프로세스 안에서 공유되어야 하므로
DB 연결과 서비스 객체는 앱 시작 시 한 번 만들어 app.state에 보관.
"""

from dataclasses import dataclass

from fastapi import Header, HTTPException, Request

from adapters.catalog.sqlite_catalog import SQLiteCatalog
from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import AppConfig
from core.ledger.projector import StockProjector
from core.ledger.sequencer import DocumentSequencer
from core.ledger.store import LedgerStore
from core.opname.manager import OpnameManager


@dataclass
class LedgerServices:
    """앱 단위 공유 객체 묶음"""

    config: AppConfig
    db: SQLiteAdapter
    catalog: SQLiteCatalog
    store: LedgerStore
    projector: StockProjector
    sequencer: DocumentSequencer
    opname: OpnameManager

    async def close(self) -> None:
        await self.db.close()


async def build_services(config: AppConfig) -> LedgerServices:
    """DB 연결 및 스키마 초기화 후 서비스 객체 생성"""
    db = SQLiteAdapter(config.db_path)
    await db.connect()
    await init_schema(db)

    catalog = SQLiteCatalog(db)
    store = LedgerStore(db)
    projector = StockProjector(store, cache_enabled=config.projection_cache)
    sequencer = DocumentSequencer(
        db,
        sequence_width=config.sequence_width,
        scope_code_width=config.scope_code_width,
        timezone_offset_hours=config.timezone_offset_hours,
    )
    opname = OpnameManager(
        db,
        store,
        projector,
        catalog,
        uncounted_policy=config.uncounted_policy,
    )
    return LedgerServices(
        config=config,
        db=db,
        catalog=catalog,
        store=store,
        projector=projector,
        sequencer=sequencer,
        opname=opname,
    )


def get_services(request: Request) -> LedgerServices:
    """공유 서비스 반환"""
    services: LedgerServices | None = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return services


def get_principal(
    x_principal_id: str | None = Header(default=None, alias="X-Principal-Id"),
) -> str:
    """인증된 principal id (created_by)

    인증/인가는 상위 게이트웨이에서 처리되며 여기서는 헤더 값만 사용.
    """
    if not x_principal_id or not x_principal_id.strip():
        raise HTTPException(status_code=401, detail="X-Principal-Id header required")
    return x_principal_id.strip()
