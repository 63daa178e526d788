"""
복식부기 Ledger 실행 엔진

날짜가 지정된 Action 목록을 정해진 순서로 적용하여 계정 잔액을 계산.
- 거래 합계 0 (금액 생략 요소 자동 계산)
- Closed 계정 전기 거부
- 잔액 검증 실패는 기록 후 실행 종료 시점에 보고

사용 예시:
```python
from datetime import date

from engine.commodity import Commodity
from engine.ledger import Account, Program, ProgramState, Transaction
from engine.types import AccountStatus

aud_cash = Account("cash", "AUD", name="Cash")
aud_bank = Account("bank", "AUD", name="Bank")

state = ProgramState([aud_cash, aud_bank], AccountStatus.OPEN)
program = Program([
    Transaction.new_simple("deposit", date(2020, 1, 2), "cash", "bank",
                           Commodity.from_str("100.00 AUD")),
])
state.execute_program(program)
```
"""

from engine.ledger.account import Account, AccountRegistry, AccountState
from engine.ledger.actions import (
    Action,
    BalanceAssertion,
    EditAccountStatus,
    FailedBalanceAssertion,
    Transaction,
    TransactionElement,
    action_order_key,
    sort_actions,
)
from engine.ledger.errors import (
    AccountingError,
    BalanceAssertionFailedError,
    ConversionError,
    DuplicateAccountError,
    ExecutionStoppedError,
    InvalidAccountStatusError,
    InvalidTransactionError,
    MissingAccountError,
    NoExchangeRateSuppliedError,
)
from engine.ledger.program import Program, ProgramState, sum_account_states

__all__ = [
    # 계정
    "Account",
    "AccountRegistry",
    "AccountState",
    # Action
    "Action",
    "EditAccountStatus",
    "BalanceAssertion",
    "FailedBalanceAssertion",
    "Transaction",
    "TransactionElement",
    "action_order_key",
    "sort_actions",
    # 실행
    "Program",
    "ProgramState",
    "sum_account_states",
    # 오류
    "AccountingError",
    "BalanceAssertionFailedError",
    "ConversionError",
    "DuplicateAccountError",
    "ExecutionStoppedError",
    "InvalidAccountStatusError",
    "InvalidTransactionError",
    "MissingAccountError",
    "NoExchangeRateSuppliedError",
]
