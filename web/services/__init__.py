"""
Web 서비스 패키지

비즈니스 로직 처리
"""

from web.services.movement_service import MovementService
from web.services.opname_service import OpnameService
from web.services.report_service import ReportService
from web.services.stock_service import StockService

__all__ = [
    "MovementService",
    "OpnameService",
    "ReportService",
    "StockService",
]
