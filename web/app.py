"""
FastAPI 애플리케이션

라우터 등록, 도메인 예외 → HTTP 상태 코드 매핑, 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config.loader import AppConfig, get_settings
from core.domain.state_machines import StateMachineError
from core.errors import (
    ConstraintViolation,
    InvalidDocumentNumber,
    ItemNotFound,
    OpnameLineNotFound,
    SessionNotFound,
    SessionNotPending,
    StockLedgerError,
    StorageUnavailable,
    UncountedLinesError,
)
from core.logging import setup_logging
from web.dependencies import build_services
from web.routes import documents, health, movements, opname, reports, stock

logger = logging.getLogger(__name__)

# 도메인 예외 → HTTP 상태 코드 (위에서부터 먼저 매칭)
ERROR_STATUS: list[tuple[type[Exception], int]] = [
    (ConstraintViolation, 422),
    (InvalidDocumentNumber, 422),
    (SessionNotPending, 409),
    (UncountedLinesError, 409),
    (ItemNotFound, 404),
    (SessionNotFound, 404),
    (OpnameLineNotFound, 404),
    (StorageUnavailable, 503),
]


def _status_for(exc: Exception) -> int:
    for exc_type, status in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status
    return 400


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StockLedgerError)
    async def handle_domain_error(request: Request, exc: StockLedgerError) -> JSONResponse:
        status = _status_for(exc)
        if status >= 500:
            logger.warning(
                "Web: 저장소 일시 장애",
                extra={"path": request.url.path, "error": str(exc)},
            )
        return JSONResponse(
            status_code=status,
            content={"detail": str(exc), "error": type(exc).__name__},
        )

    @app.exception_handler(StateMachineError)
    async def handle_state_error(request: Request, exc: StateMachineError) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"detail": str(exc), "error": type(exc).__name__},
        )

    @app.exception_handler(ValueError)
    async def handle_value_error(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc), "error": "ValueError"},
        )


def create_app(config: AppConfig | None = None, configure_logging: bool = False) -> FastAPI:
    """앱 생성

    Args:
        config: 설정 (None이면 settings.yaml 로드)
        configure_logging: 시작 시 setup_logging("web") 호출 여부
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """앱 생명주기 관리"""
        app_config = config or get_settings().config
        if configure_logging:
            setup_logging("web", console_level=app_config.log_level, file_level=app_config.log_level)

        # 시작 시 - DB 스키마 자동 초기화 및 공유 객체 생성
        services = await build_services(app_config)
        app.state.services = services
        logger.info("Web: 서비스 초기화 완료", extra={"db_path": str(app_config.db_path)})

        yield

        # 종료 시 - 리소스 정리
        await services.close()
        app.state.services = None
        logger.info("Web: DB 연결 종료 완료")

    app = FastAPI(
        title="Stock Ledger API",
        description="재고 Ledger / 실사 / 문서 번호 API",
        version=health.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS 설정 (개발용)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # =========================================================================
    # API 라우터 등록
    # =========================================================================

    app.include_router(health.router)
    app.include_router(stock.router)
    app.include_router(movements.router)
    app.include_router(documents.router)
    app.include_router(opname.router)
    app.include_router(reports.router)

    return app


app = create_app(configure_logging=True)
