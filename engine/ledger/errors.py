"""
Ledger 오류 정의

오류 등급:
- 구조 오류 (InvalidTransactionError): 즉시 중단
- 참조 오류 (MissingAccountError): 즉시 중단
- 상태 오류 (InvalidAccountStatusError): 즉시 중단
- 변환 오류 (ConversionError, NoExchangeRateSuppliedError): 즉시 중단
- 잔액 검증 실패 (BalanceAssertionFailedError): 기록 후 실행 종료 시점에 보고
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from engine.commodity import Commodity
    from engine.ledger.actions import Action, FailedBalanceAssertion, Transaction
    from engine.types import AccountStatus


def describe_action(action: Any) -> str:
    """오류 메시지용 Action 요약 (종류 + 날짜)"""
    kind = getattr(action, "kind", None)
    kind_name = kind.value if kind is not None else type(action).__name__
    action_date = getattr(action, "date", None)
    if action_date is None:
        return kind_name
    return f"{kind_name} on {action_date.isoformat()}"


class AccountingError(Exception):
    """Ledger 오류 기본 클래스

    실행 루프가 action_index, action 컨텍스트를 채운다.
    """

    def __init__(self, message: str):
        self.message = message
        self.action_index: int | None = None
        self.action: Action | None = None
        super().__init__(message)

    def with_context(self, action_index: int, action: Action) -> AccountingError:
        """실행 위치 컨텍스트 설정 (이미 설정된 경우 유지)"""
        if self.action_index is None:
            self.action_index = action_index
            self.action = action
        return self

    def __str__(self) -> str:
        if self.action_index is None or self.action is None:
            return self.message
        return f"{self.message} (action #{self.action_index}: {describe_action(self.action)})"


class InvalidTransactionError(AccountingError):
    """구조적으로 잘못된 거래

    - 요소 2개 미만
    - 금액 미지정 요소 2개 이상
    - 합계가 0이 아님
    """

    def __init__(self, transaction: Transaction, reason: str):
        self.transaction = transaction
        self.reason = reason
        super().__init__(
            f"invalid transaction {transaction.description or '<no description>'!r} "
            f"dated {transaction.date.isoformat()} because {reason}"
        )


class MissingAccountError(AccountingError):
    """ProgramState에 없는 계정 참조"""

    def __init__(self, account_id: str, action: Action | None = None):
        self.account_id = account_id
        self.source_action = action
        message = f"the account state with the id {account_id} was requested but cannot be found"
        if action is not None:
            message = f"{message} ({describe_action(action)})"
        super().__init__(message)


class InvalidAccountStatusError(AccountingError):
    """계정 상태상 허용되지 않는 작업 (예: Closed 계정에 전기)"""

    def __init__(self, account_id: str, status: AccountStatus, action: Action | None = None):
        self.account_id = account_id
        self.status = status
        self.source_action = action
        message = f"invalid account status ({status.value}) for account {account_id}"
        if action is not None:
            message = f"{message} ({describe_action(action)})"
        super().__init__(message)


class ConversionError(AccountingError):
    """commodity type 불일치 또는 환율 누락

    원인 예외(CommodityError / ExchangeRateError)는 cause에 보관.
    """

    def __init__(self, cause: Exception, action: Action | None = None):
        self.cause = cause
        self.source_action = action
        message = f"conversion error: {cause}"
        if action is not None:
            message = f"{message} ({describe_action(action)})"
        super().__init__(message)


class NoExchangeRateSuppliedError(AccountingError):
    """변환이 필요하지만 환율 테이블이 없음"""

    def __init__(self, amount: Commodity, target_type_id: str):
        self.amount = amount
        self.target_type_id = target_type_id
        super().__init__(
            f"no exchange rate supplied, unable to convert commodity {amount} "
            f"to type {target_type_id}"
        )


class BalanceAssertionFailedError(AccountingError):
    """잔액 검증 실패 (실행 완료 후 보고)

    failures: 기록된 모든 실패 (발생 순서)
    failure: 첫 번째 실패
    """

    def __init__(self, failures: list[FailedBalanceAssertion]):
        if not failures:
            raise ValueError("BalanceAssertionFailedError requires at least one failure")
        self.failures = list(failures)
        self.failure = self.failures[0]
        message = f"the balance assertion failed {self.failure}"
        if len(self.failures) > 1:
            message = f"{message} (and {len(self.failures) - 1} more)"
        super().__init__(message)


class ExecutionStoppedError(AccountingError):
    """중단 요청으로 실행이 멈춤"""

    def __init__(self, next_index: int):
        self.next_index = next_index
        super().__init__(f"execution stopped before action #{next_index}")


class DuplicateAccountError(AccountingError):
    """같은 ID의 계정 중복 등록"""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"an account with the id {account_id} is already registered")
