"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class AccountStatus(str, Enum):
    """계정 상태 (AccountState에 저장)"""

    OPEN = "Open"
    CLOSED = "Closed"


class ActionKind(str, Enum):
    """Action 종류

    같은 날짜의 Action은 rank 순서로 실행된다.
    - EditAccountStatus: 같은 날의 거래/검증보다 먼저 반영
    - BalanceAssertion: 그 날 시작 시점의 잔액 검증
    - Transaction: 마지막
    """

    EDIT_ACCOUNT_STATUS = "EditAccountStatus"
    BALANCE_ASSERTION = "BalanceAssertion"
    TRANSACTION = "Transaction"

    @property
    def rank(self) -> int:
        """정렬 우선순위 (작을수록 먼저)"""
        return _ACTION_KIND_RANK[self]


_ACTION_KIND_RANK: dict[ActionKind, int] = {
    ActionKind.EDIT_ACCOUNT_STATUS: 0,
    ActionKind.BALANCE_ASSERTION: 1,
    ActionKind.TRANSACTION: 2,
}


class ExecutionStatus(str, Enum):
    """Program 실행 상태

    전이 규칙:
    - PENDING → RUNNING: 실행 시작
    - RUNNING → HALTED: 치명적 오류 또는 중단 요청
    - RUNNING → COMPLETED: 모든 Action 적용 완료
    """

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    HALTED = "HALTED"
    COMPLETED = "COMPLETED"
