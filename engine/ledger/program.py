"""
Program 실행

- Program: 정렬된 불변 Action 목록
- ProgramState: 계정 상태 + 잔액 검증 실패 기록 + 실행 위치
- sum_account_states: 모든 계정 잔액을 하나의 commodity type으로 합산 (보고용)

실행 상태 전이:
- PENDING → RUNNING: execute_program 호출
- RUNNING → HALTED: 치명적 오류 또는 중단 요청 (이후 Action 미실행)
- RUNNING → COMPLETED: 모든 Action 적용 (잔액 검증 실패가 있으면 완료 후 보고)
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Iterable, Iterator, Mapping

from engine.commodity import Commodity, CommodityError, ExchangeRate, ExchangeRateError
from engine.constants import Defaults
from engine.ledger.account import Account, AccountRegistry, AccountState
from engine.ledger.actions import Action, FailedBalanceAssertion, sort_actions
from engine.ledger.errors import (
    AccountingError,
    BalanceAssertionFailedError,
    ConversionError,
    ExecutionStoppedError,
    MissingAccountError,
    NoExchangeRateSuppliedError,
)
from engine.types import AccountStatus, ExecutionStatus

logger = logging.getLogger(__name__)


class Program:
    """실행할 Action 목록 (불변)

    생성 시 한 번 action_order_key로 정렬된다.
    """

    def __init__(self, actions: Iterable[Action] = ()):
        self._actions: tuple[Action, ...] = tuple(sort_actions(actions))

    @property
    def actions(self) -> tuple[Action, ...]:
        return self._actions

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[Action]:
        return iter(self._actions)

    def __getitem__(self, index: int) -> Action:
        return self._actions[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Program):
            return NotImplemented
        return self._actions == other._actions

    def __repr__(self) -> str:
        return f"Program({len(self._actions)} actions)"


def sum_account_states(
    account_states: Mapping[str, AccountState] | Iterable[AccountState],
    sum_type_id: str,
    exchange_rate: ExchangeRate | None = None,
) -> Commodity:
    """모든 계정 잔액을 sum_type_id로 합산

    sum_type_id와 다른 type의 잔액은 exchange_rate로 변환한다.

    Raises:
        NoExchangeRateSuppliedError: 변환이 필요한데 환율 테이블이 없음
        ConversionError: 환율 테이블에 코드가 없음
    """
    states = account_states.values() if isinstance(account_states, Mapping) else account_states

    total = Commodity.zero(sum_type_id)
    for account_state in states:
        amount = account_state.amount
        if amount.type_id != sum_type_id:
            if exchange_rate is None:
                raise NoExchangeRateSuppliedError(amount, sum_type_id)
            try:
                amount = exchange_rate.convert(amount, sum_type_id)
            except ExchangeRateError as e:
                raise ConversionError(e) from e
        try:
            total = total.add(amount)
        except CommodityError as e:
            raise ConversionError(e) from e

    return total


class ProgramState:
    """Program 실행 상태

    계정 목록은 생성 시 고정되며, 각 계정의 AccountState는
    잔액 0과 지정된 초기 상태로 생성된다.

    Args:
        accounts: 등록할 계정 (AccountRegistry 또는 Account 목록)
        account_status: 초기 계정 상태
        default_epsilon: BalanceAssertion 기본 허용 오차
    """

    def __init__(
        self,
        accounts: AccountRegistry | Iterable[Account],
        account_status: AccountStatus = AccountStatus.CLOSED,
        default_epsilon: Decimal = Defaults.EPSILON,
    ):
        self.registry = accounts if isinstance(accounts, AccountRegistry) else AccountRegistry(accounts)
        self.account_states: dict[str, AccountState] = {
            account.id: AccountState.initial(account, account_status)
            for account in self.registry
        }
        self.default_epsilon = default_epsilon
        self._failed_balance_assertions: list[FailedBalanceAssertion] = []
        self.current_action_index: int | None = None
        self.status = ExecutionStatus.PENDING

    @property
    def failed_balance_assertions(self) -> list[FailedBalanceAssertion]:
        """기록된 잔액 검증 실패 (복사본)"""
        return list(self._failed_balance_assertions)

    def execute_program(
        self,
        program: Program,
        should_stop: Callable[[], bool] | None = None,
    ) -> None:
        """Program을 순서대로 실행하여 상태 변경

        Args:
            program: 실행할 Program
            should_stop: Action 사이마다 확인하는 중단 요청 (True면 중단)

        Raises:
            AccountingError: 치명적 오류 (실행 위치 컨텍스트 포함)
            ExecutionStoppedError: 중단 요청
            BalanceAssertionFailedError: 모든 Action 실행 후 잔액 검증 실패가 있는 경우
        """
        self.status = ExecutionStatus.RUNNING
        logger.info(f"Executing program: {len(program)} actions, {len(self.account_states)} accounts")

        for index, action in enumerate(program):
            if should_stop is not None and should_stop():
                self.status = ExecutionStatus.HALTED
                logger.warning(f"Execution stopped before action #{index}")
                raise ExecutionStoppedError(index)

            self.current_action_index = index
            try:
                action.perform(self)
            except AccountingError as e:
                self.status = ExecutionStatus.HALTED
                e.with_context(index, action)
                logger.warning(f"Execution halted: {e}")
                raise

        self.status = ExecutionStatus.COMPLETED

        if self._failed_balance_assertions:
            logger.warning(
                f"Program completed with {len(self._failed_balance_assertions)} "
                f"failed balance assertion(s)"
            )
            raise BalanceAssertionFailedError(self._failed_balance_assertions)

        logger.info("Program completed")

    def get_account(self, account_id: str) -> Account | None:
        return self.registry.get(account_id)

    def require_account(self, account_id: str, action: Action | None = None) -> Account:
        """계정 조회 (없으면 MissingAccountError)"""
        account = self.registry.get(account_id)
        if account is None or account_id not in self.account_states:
            raise MissingAccountError(account_id, action)
        return account

    def get_account_state(self, account_id: str) -> AccountState | None:
        return self.account_states.get(account_id)

    def require_account_state(self, account_id: str, action: Action | None = None) -> AccountState:
        """AccountState 조회 (없으면 MissingAccountError)"""
        account_state = self.account_states.get(account_id)
        if account_state is None:
            raise MissingAccountError(account_id, action)
        return account_state

    def record_failed_balance_assertion(self, failure: FailedBalanceAssertion) -> None:
        """잔액 검증 실패 기록 (추가 전용)"""
        self._failed_balance_assertions.append(failure)

    def sum(self, sum_type_id: str, exchange_rate: ExchangeRate | None = None) -> Commodity:
        """모든 계정 잔액 합산 (sum_account_states 참고)"""
        return sum_account_states(self.account_states, sum_type_id, exchange_rate)
