"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from decimal import Decimal
from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: engine/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    # 잔액 검증 허용 오차 (BalanceAssertion 기본값)
    EPSILON: Decimal = Decimal("0.000001")

    # ProgramState 생성 시 계정 초기 상태
    INITIAL_ACCOUNT_STATUS: str = "Closed"

    # 계정 ID 자동 생성 길이
    ACCOUNT_ID_LENGTH: int = 20

    # Commodity type 코드 최대 길이
    TYPE_ID_MAX_LENGTH: int = 8

    LOG_LEVEL: str = "INFO"


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"


class Precision:
    """Decimal 연산 정밀도 (환율 변환)

    결과는 96비트 정수 계수와 소수 자릿수 28 이하로 표현 가능한 값으로 맞춘다.
    - 나눗셈: 절사
    - 곱셈: 반올림 (ROUND_HALF_EVEN)
    """

    COEFFICIENT_LIMIT: int = 2**96
    MAX_SCALE: int = 28
