"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from decimal import Decimal
from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수 (settings.yaml이 없거나 필드가 빠졌을 때 사용)"""

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # 영업 기준 타임존 (WIB, UTC+7) - DATECODE 계산 기준
    TIMEZONE_OFFSET_HOURS: int = 7

    # 미실사 라인 처리 정책 (skip / reject / zero)
    UNCOUNTED_POLICY: str = "skip"

    # 판매가 미설정 시 원가 대비 마진 배수
    DISTRIBUTION_MARGIN: Decimal = Decimal("1.3")

    # 문서 번호 자릿수
    SEQUENCE_WIDTH: int = 3
    SCOPE_CODE_WIDTH: int = 5

    # Projection 캐시 사용 여부
    PROJECTION_CACHE: bool = True

    # Ledger 조회 페이지 크기
    QUERY_PAGE_SIZE: int = 500


class DocumentPrefix:
    """문서 번호 접두사"""

    SURAT_JALAN: str = "SJ"  # 출고 (distribution)
    INVOICE: str = "INV"  # 입고 (purchase)


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    DEFAULT_DB: Path = DATA_DIR / "stockledger.db"
