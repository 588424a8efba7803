"""
설정 로더

settings.yaml 로드 및 애플리케이션 설정 생성
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths
from core.types import UncountedPolicy


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지.
    파일이 없으면 core.constants.Defaults 값 사용.
    """

    db_path: Path = field(default_factory=lambda: Paths.DEFAULT_DB)
    timezone_offset_hours: int = Defaults.TIMEZONE_OFFSET_HOURS
    uncounted_policy: UncountedPolicy = UncountedPolicy(Defaults.UNCOUNTED_POLICY)
    distribution_margin: Decimal = Defaults.DISTRIBUTION_MARGIN
    sequence_width: int = Defaults.SEQUENCE_WIDTH
    scope_code_width: int = Defaults.SCOPE_CODE_WIDTH
    projection_cache: bool = Defaults.PROJECTION_CACHE
    log_level: str = Defaults.LOG_LEVEL
    web_host: str = Defaults.WEB_HOST
    web_port: int = Defaults.WEB_PORT


class ConfigLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def _get_int(data: dict[str, Any], key: str, default: int, minimum: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigLoadError(f"settings.yaml의 '{key}'는 정수여야 합니다: {value!r}")
    if value < minimum:
        raise ConfigLoadError(f"settings.yaml의 '{key}'는 {minimum} 이상이어야 합니다: {value}")
    return value


def parse_config(data: dict[str, Any], base_dir: Path | None = None) -> AppConfig:
    """dict를 AppConfig로 변환

    Args:
        data: YAML에서 읽은 dict (ledger / opname / documents / web 섹션)
        base_dir: 상대 db_path 기준 디렉토리

    Returns:
        AppConfig 인스턴스

    Raises:
        ConfigLoadError: 필드 형식이 잘못된 경우
    """
    if not isinstance(data, dict):
        raise ConfigLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    ledger = data.get("ledger") or {}
    opname = data.get("opname") or {}
    documents = data.get("documents") or {}
    web = data.get("web") or {}
    for name, section in (("ledger", ledger), ("opname", opname), ("documents", documents), ("web", web)):
        if not isinstance(section, dict):
            raise ConfigLoadError(f"settings.yaml의 '{name}' 섹션은 매핑이어야 합니다")

    # db_path (상대 경로는 설정 파일 기준)
    db_path_raw = ledger.get("db_path")
    if db_path_raw is None:
        db_path = Paths.DEFAULT_DB
    else:
        db_path = Path(str(db_path_raw))
        if not db_path.is_absolute() and base_dir is not None:
            db_path = base_dir / db_path

    # uncounted_policy 검증
    policy_str = opname.get("uncounted_policy", Defaults.UNCOUNTED_POLICY)
    try:
        policy = UncountedPolicy(policy_str)
    except ValueError as e:
        valid = [p.value for p in UncountedPolicy]
        raise ConfigLoadError(
            f"유효하지 않은 uncounted_policy입니다: '{policy_str}'. 유효한 값: {valid}"
        ) from e

    # distribution_margin 검증 (float 오차 방지를 위해 str 경유)
    margin_raw = documents.get("distribution_margin", data.get("distribution_margin", Defaults.DISTRIBUTION_MARGIN))
    try:
        margin = Decimal(str(margin_raw))
    except InvalidOperation as e:
        raise ConfigLoadError(f"distribution_margin 형식 오류: {margin_raw!r}") from e
    if margin <= 0:
        raise ConfigLoadError(f"distribution_margin은 0보다 커야 합니다: {margin}")

    offset = ledger.get("timezone_offset_hours", Defaults.TIMEZONE_OFFSET_HOURS)
    if isinstance(offset, bool) or not isinstance(offset, int) or not -12 <= offset <= 14:
        raise ConfigLoadError(f"timezone_offset_hours 범위 오류: {offset!r}")

    projection_cache = ledger.get("projection_cache", Defaults.PROJECTION_CACHE)
    if not isinstance(projection_cache, bool):
        raise ConfigLoadError(f"projection_cache는 true/false여야 합니다: {projection_cache!r}")

    log_level = str(data.get("log_level", Defaults.LOG_LEVEL)).upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigLoadError(f"유효하지 않은 log_level입니다: '{log_level}'")

    return AppConfig(
        db_path=db_path,
        timezone_offset_hours=offset,
        uncounted_policy=policy,
        distribution_margin=margin,
        sequence_width=_get_int(documents, "sequence_width", Defaults.SEQUENCE_WIDTH, 1),
        scope_code_width=_get_int(documents, "scope_code_width", Defaults.SCOPE_CODE_WIDTH, 1),
        projection_cache=projection_cache,
        log_level=log_level,
        web_host=str(web.get("host", Defaults.WEB_HOST)),
        web_port=_get_int(web, "port", Defaults.WEB_PORT, 1),
    )


def load_config(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용, 없으면 기본값)

    Returns:
        AppConfig 인스턴스

    Raises:
        ConfigLoadError: 명시한 파일이 없거나 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE
        if not path.exists():
            return AppConfig()

    if not path.exists():
        raise ConfigLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        # 빈 파일은 전부 기본값
        return AppConfig()

    return parse_config(data, base_dir=path.parent)


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_config(settings_path)

    @property
    def config(self) -> AppConfig:
        """로드된 설정 전체"""
        assert self._config is not None
        return self._config

    @property
    def db_path(self) -> Path:
        """DB 경로"""
        return self.config.db_path

    @property
    def uncounted_policy(self) -> UncountedPolicy:
        """미실사 라인 처리 정책"""
        return self.config.uncounted_policy

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
