"""
설정 로더

settings.yaml 로드 및 엔진 설정 생성
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

import yaml

from engine.constants import Defaults, Paths
from engine.logging import resolve_level
from engine.types import AccountStatus


@dataclass(frozen=True)
class EngineSettings:
    """엔진 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    default_epsilon: Decimal = Defaults.EPSILON
    initial_account_status: AccountStatus = AccountStatus(Defaults.INITIAL_ACCOUNT_STATUS)
    report_type_id: str | None = None
    log_level: str = Defaults.LOG_LEVEL


class ConfigLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def load_settings(path: Path | None = None) -> EngineSettings:
    """settings.yaml 파일 로드

    파일이 없으면 기본값을 사용한다.

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        EngineSettings 인스턴스

    Raises:
        ConfigLoadError: 형식이 잘못되었거나 값이 유효하지 않은 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        return EngineSettings()

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise ConfigLoadError(f"failed to parse settings file {path}: {e}") from e

    if data is None:
        return EngineSettings()

    if not isinstance(data, dict):
        raise ConfigLoadError(f"settings file {path} must contain a mapping")

    # epsilon 검증 (float 오차 방지를 위해 문자열 경유)
    epsilon_raw = data.get("default_epsilon", Defaults.EPSILON)
    try:
        epsilon = Decimal(str(epsilon_raw))
    except InvalidOperation as e:
        raise ConfigLoadError(f"invalid default_epsilon: {epsilon_raw!r}") from e
    if not epsilon.is_finite():
        raise ConfigLoadError(f"default_epsilon must be finite: {epsilon_raw!r}")
    if epsilon < 0:
        raise ConfigLoadError(f"default_epsilon must not be negative: {epsilon}")

    status_raw = data.get("initial_account_status", Defaults.INITIAL_ACCOUNT_STATUS)
    try:
        initial_status = AccountStatus(status_raw)
    except ValueError as e:
        valid = [s.value for s in AccountStatus]
        raise ConfigLoadError(
            f"invalid initial_account_status: {status_raw!r}. valid values: {valid}"
        ) from e

    report_type_id = data.get("report_type_id")
    if report_type_id is not None:
        report_type_id = str(report_type_id)

    log_level = str(data.get("log_level", Defaults.LOG_LEVEL)).strip().upper()
    try:
        resolve_level(log_level)
    except ValueError as e:
        raise ConfigLoadError(f"invalid log_level: {log_level!r}") from e

    return EngineSettings(
        default_epsilon=epsilon,
        initial_account_status=initial_status,
        report_type_id=report_type_id,
        log_level=log_level,
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _settings: EngineSettings | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._settings is None:
            self._settings = load_settings(settings_path)

    @property
    def default_epsilon(self) -> Decimal:
        """잔액 검증 허용 오차"""
        assert self._settings is not None
        return self._settings.default_epsilon

    @property
    def initial_account_status(self) -> AccountStatus:
        """계정 초기 상태"""
        assert self._settings is not None
        return self._settings.initial_account_status

    @property
    def report_type_id(self) -> str | None:
        """합계 보고용 commodity type"""
        assert self._settings is not None
        return self._settings.report_type_id

    @property
    def log_level(self) -> str:
        """로그 레벨"""
        assert self._settings is not None
        return self._settings.log_level

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._settings = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
