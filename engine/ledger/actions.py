"""
Action 정의

ProgramState를 변경하는 날짜가 지정된 작업.
종류는 EditAccountStatus, BalanceAssertion, Transaction 세 가지로 고정.

정렬 규칙 (action_order_key):
- 1차: 날짜 오름차순
- 2차: 종류 우선순위 (EditAccountStatus < BalanceAssertion < Transaction)
- 동일 (날짜, 종류)는 입력 순서 유지 (안정 정렬)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, ClassVar, Iterable, Union

from engine.commodity import Commodity, CommodityError, ExchangeRate
from engine.ledger.errors import (
    ConversionError,
    InvalidAccountStatusError,
    InvalidTransactionError,
)
from engine.types import AccountStatus, ActionKind

if TYPE_CHECKING:
    from engine.ledger.program import ProgramState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionElement:
    """거래 요소

    amount가 None이면 나머지 요소 합계의 부호 반전 값으로 계산된다.
    exchange_rate는 보관/직렬화만 하며 전기 시 사용하지 않는다.
    """

    account_id: str
    amount: Commodity | None = None
    exchange_rate: ExchangeRate | None = None


@dataclass(frozen=True)
class Transaction:
    """둘 이상의 계정 간 Commodity 이동

    요소 금액 합계는 0이어야 하며, 최대 하나의 요소만 금액을 생략할 수 있다.
    """

    kind: ClassVar[ActionKind] = ActionKind.TRANSACTION

    date: date
    elements: tuple[TransactionElement, ...]
    description: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.elements, tuple):
            object.__setattr__(self, "elements", tuple(self.elements))

    @classmethod
    def new_simple(
        cls,
        description: str | None,
        date: date,
        from_account: str,
        to_account: str,
        amount: Commodity,
        exchange_rate: ExchangeRate | None = None,
    ) -> Transaction:
        """from_account에서 to_account로 amount를 옮기는 2요소 거래

        from 요소는 -amount, to 요소는 금액 생략 (자동 계산).
        """
        return cls(
            date=date,
            description=description,
            elements=(
                TransactionElement(from_account, amount.neg(), exchange_rate),
                TransactionElement(to_account, None, exchange_rate),
            ),
        )

    def get_element(self, account_id: str) -> TransactionElement | None:
        """account_id의 첫 번째 요소 조회"""
        for element in self.elements:
            if element.account_id == account_id:
                return element
        return None

    def resolve_amounts(self, program_state: ProgramState) -> list[Commodity]:
        """요소별 금액 확정

        금액 생략 요소는 나머지 합계의 부호 반전 값으로 채운다.
        생략 요소가 없으면 합계가 정확히 0이어야 한다 (허용 오차 없음).

        Raises:
            InvalidTransactionError: 요소 2개 미만, 생략 요소 2개 이상, 합계 != 0
            MissingAccountError: 기준 요소의 계정이 없음
            ConversionError: 기준 type과 다른 금액
        """
        if len(self.elements) < 2:
            raise InvalidTransactionError(
                self, "a transaction cannot have less than 2 elements"
            )

        empty_index: int | None = None
        for i, element in enumerate(self.elements):
            if element.amount is None:
                if empty_index is not None:
                    raise InvalidTransactionError(
                        self, "multiple elements with no amount specified"
                    )
                empty_index = i

        # 기준 type: 생략 요소의 계정 type, 없으면 첫 요소의 계정 type
        pivot = self.elements[empty_index if empty_index is not None else 0]
        pivot_type_id = program_state.require_account(pivot.account_id, self).commodity_type_id

        total = Commodity.zero(pivot_type_id)
        for element in self.elements:
            if element.amount is None:
                continue
            try:
                total = total.add(element.amount)
            except CommodityError as e:
                raise ConversionError(e, self) from e

        if empty_index is None:
            if not total.is_zero():
                raise InvalidTransactionError(
                    self, "sum of transaction elements does not equal zero"
                )
            return [element.amount for element in self.elements]

        solved = total.neg()
        return [
            solved if i == empty_index else element.amount
            for i, element in enumerate(self.elements)
        ]

    def perform(self, program_state: ProgramState) -> None:
        """거래 전기

        모든 요소를 검증하고 새 잔액을 계산한 뒤에만 AccountState를 변경한다.
        실패 시 어떤 계정도 변경되지 않는다.
        """
        amounts = self.resolve_amounts(program_state)

        new_balances: dict[str, Commodity] = {}
        for element, amount in zip(self.elements, amounts):
            account_state = program_state.require_account_state(element.account_id, self)

            if account_state.status == AccountStatus.CLOSED:
                raise InvalidAccountStatusError(element.account_id, account_state.status, self)

            # 같은 계정이 여러 번 등장하면 누적
            current = new_balances.get(element.account_id, account_state.amount)
            try:
                new_balances[element.account_id] = current.add(amount)
            except CommodityError as e:
                raise ConversionError(e, self) from e

        for account_id, balance in new_balances.items():
            program_state.account_states[account_id].amount = balance

        logger.debug(
            f"Transaction posted: {self.description or '-'} "
            f"({self.date.isoformat()}, {len(self.elements)} elements)"
        )


@dataclass(frozen=True)
class EditAccountStatus:
    """계정 상태 변경"""

    kind: ClassVar[ActionKind] = ActionKind.EDIT_ACCOUNT_STATUS

    account_id: str
    newstatus: AccountStatus
    date: date

    def perform(self, program_state: ProgramState) -> None:
        account_state = program_state.require_account_state(self.account_id, self)
        account_state.status = self.newstatus
        logger.debug(f"Account {self.account_id} status -> {self.newstatus.value}")


@dataclass(frozen=True)
class BalanceAssertion:
    """date 시작 시점의 계정 잔액 검증

    같은 날의 상태 변경 후, 같은 날의 거래 전에 평가된다.
    불일치는 FailedBalanceAssertion으로 기록되고 실행은 계속된다.
    """

    kind: ClassVar[ActionKind] = ActionKind.BALANCE_ASSERTION

    account_id: str
    date: date
    expected_balance: Commodity
    epsilon: Decimal | None = None

    def perform(self, program_state: ProgramState) -> None:
        account_state = program_state.require_account_state(self.account_id, self)
        epsilon = self.epsilon if self.epsilon is not None else program_state.default_epsilon

        if account_state.amount.eq_approx(self.expected_balance, epsilon):
            return

        failure = FailedBalanceAssertion(self, account_state.amount)
        program_state.record_failed_balance_assertion(failure)
        logger.warning(f"Balance assertion failed: {failure}")

    def __str__(self) -> str:
        return (
            f"BalanceAssertion(account={self.account_id}, date={self.date.isoformat()}, "
            f"expected={self.expected_balance})"
        )


@dataclass(frozen=True)
class FailedBalanceAssertion:
    """실패한 잔액 검증 기록 (추가 전용)"""

    assertion: BalanceAssertion
    actual_balance: Commodity

    def __str__(self) -> str:
        return f"{self.assertion}, the actual state of the account is {self.actual_balance}"


Action = Union[EditAccountStatus, BalanceAssertion, Transaction]


def action_order_key(action: Action) -> tuple[date, int]:
    """정렬 키 (날짜, 종류 우선순위)"""
    return (action.date, action.kind.rank)


def sort_actions(actions: Iterable[Action]) -> list[Action]:
    """Action 정렬 (안정 정렬, 동일 키는 입력 순서 유지)"""
    return sorted(actions, key=action_order_key)
