"""Program / ProgramState 실행 테스트"""

from decimal import Decimal

import pytest

from engine.commodity import Commodity, ExchangeRate
from engine.ledger import (
    Account,
    AccountRegistry,
    AccountingError,
    BalanceAssertion,
    BalanceAssertionFailedError,
    ConversionError,
    EditAccountStatus,
    ExecutionStoppedError,
    InvalidAccountStatusError,
    MissingAccountError,
    NoExchangeRateSuppliedError,
    Program,
    ProgramState,
    Transaction,
    TransactionElement,
    sum_account_states,
)
from engine.types import AccountStatus, ExecutionStatus
from tests.utils.helpers import c, d


@pytest.fixture
def reference_program() -> Program:
    """A, B 개설 후 두 건의 거래와 잔액 검증"""
    return Program([
        EditAccountStatus("A", AccountStatus.OPEN, d("2020-01-01")),
        EditAccountStatus("B", AccountStatus.OPEN, d("2020-01-01")),
        Transaction(
            description="Transaction 1",
            date=d("2020-01-02"),
            elements=(
                TransactionElement("A", c("-2.52 AUD")),
                TransactionElement("B", c("2.52 AUD")),
            ),
        ),
        Transaction(
            description="Transaction 2",
            date=d("2020-01-02"),
            elements=(
                TransactionElement("A", c("-1.00 AUD")),
                TransactionElement("B", None),
            ),
        ),
        BalanceAssertion("A", d("2020-01-03"), c("-3.52 AUD")),
    ])


class TestProgram:
    """Program 테스트"""

    def test_sorted_on_construction(self) -> None:
        transaction = Transaction.new_simple(None, d("2020-01-01"), "A", "B", c("1 AUD"))
        assertion = BalanceAssertion("A", d("2020-01-01"), c("0 AUD"))
        edit = EditAccountStatus("A", AccountStatus.OPEN, d("2020-01-01"))

        program = Program([transaction, assertion, edit])

        assert list(program) == [edit, assertion, transaction]
        assert program[0] is edit
        assert len(program) == 3

    def test_actions_immutable(self) -> None:
        program = Program([EditAccountStatus("A", AccountStatus.OPEN, d("2020-01-01"))])

        assert isinstance(program.actions, tuple)

    def test_equality(self) -> None:
        edit = EditAccountStatus("A", AccountStatus.OPEN, d("2020-01-01"))
        assertion = BalanceAssertion("A", d("2020-01-01"), c("0 AUD"))

        assert Program([edit, assertion]) == Program([assertion, edit])
        assert Program([edit]) != Program([assertion])

    def test_empty(self) -> None:
        assert len(Program()) == 0


class TestProgramStateConstruction:
    """ProgramState 생성 테스트"""

    def test_zero_initialized(self, closed_state: ProgramState) -> None:
        assert set(closed_state.account_states) == {"A", "B"}
        for account_state in closed_state.account_states.values():
            assert account_state.amount == Commodity.zero("AUD")
            assert account_state.status == AccountStatus.CLOSED

    def test_from_registry(self) -> None:
        registry = AccountRegistry([Account("x", "USD")])
        state = ProgramState(registry, AccountStatus.OPEN)

        assert state.registry is registry
        assert state.get_account("x").commodity_type_id == "USD"
        assert state.get_account_state("x").status == AccountStatus.OPEN

    def test_initial_execution_state(self, closed_state: ProgramState) -> None:
        assert closed_state.status == ExecutionStatus.PENDING
        assert closed_state.current_action_index is None
        assert closed_state.failed_balance_assertions == []

    def test_lookups(self, closed_state: ProgramState) -> None:
        assert closed_state.get_account_state("ghost") is None
        assert closed_state.get_account("ghost") is None
        with pytest.raises(MissingAccountError):
            closed_state.require_account_state("ghost")
        with pytest.raises(MissingAccountError):
            closed_state.require_account("ghost")


class TestExecuteProgram:
    """execute_program 테스트"""

    def test_reference_program(self, closed_state: ProgramState, reference_program: Program) -> None:
        """두 계정 (AUD, Closed) 시나리오"""
        closed_state.execute_program(reference_program)

        assert closed_state.status == ExecutionStatus.COMPLETED
        assert closed_state.account_states["A"].amount == c("-3.52 AUD")
        assert closed_state.account_states["B"].amount == c("3.52 AUD")
        assert closed_state.account_states["A"].status == AccountStatus.OPEN
        assert sum_account_states(closed_state.account_states, "AUD") == c("0.00 AUD")
        assert closed_state.current_action_index == len(reference_program) - 1

    def test_empty_program(self, closed_state: ProgramState) -> None:
        closed_state.execute_program(Program())

        assert closed_state.status == ExecutionStatus.COMPLETED
        assert closed_state.current_action_index is None

    def test_fatal_error_halts(self, closed_state: ProgramState) -> None:
        """Closed 계정 전기 → 즉시 중단, 이후 Action 미실행"""
        program = Program([
            Transaction.new_simple("to closed", d("2020-01-02"), "A", "B", c("1 AUD")),
            EditAccountStatus("A", AccountStatus.OPEN, d("2020-01-03")),
        ])

        with pytest.raises(InvalidAccountStatusError) as exc_info:
            closed_state.execute_program(program)

        assert closed_state.status == ExecutionStatus.HALTED
        assert closed_state.current_action_index == 0
        assert closed_state.account_states["A"].status == AccountStatus.CLOSED
        assert exc_info.value.action_index == 0
        assert exc_info.value.action is program[0]
        assert "action #0" in str(exc_info.value)

    def test_missing_account_halts(self, closed_state: ProgramState) -> None:
        program = Program([
            EditAccountStatus("A", AccountStatus.OPEN, d("2020-01-01")),
            EditAccountStatus("ghost", AccountStatus.OPEN, d("2020-01-02")),
            EditAccountStatus("B", AccountStatus.OPEN, d("2020-01-03")),
        ])

        with pytest.raises(MissingAccountError):
            closed_state.execute_program(program)

        assert closed_state.current_action_index == 1
        assert closed_state.account_states["A"].status == AccountStatus.OPEN
        assert closed_state.account_states["B"].status == AccountStatus.CLOSED

    def test_assertion_failure_does_not_stop(self, closed_state: ProgramState) -> None:
        """잔액 검증 실패 후에도 나머지 Action 실행, 완료 후 보고"""
        program = Program([
            EditAccountStatus("A", AccountStatus.OPEN, d("2020-01-01")),
            EditAccountStatus("B", AccountStatus.OPEN, d("2020-01-01")),
            BalanceAssertion("A", d("2020-01-02"), c("5 AUD")),
            Transaction.new_simple(None, d("2020-01-02"), "A", "B", c("1 AUD")),
            BalanceAssertion("B", d("2020-01-03"), c("2 AUD")),
        ])

        with pytest.raises(BalanceAssertionFailedError) as exc_info:
            closed_state.execute_program(program)

        error = exc_info.value
        assert closed_state.status == ExecutionStatus.COMPLETED
        assert closed_state.account_states["B"].amount == c("1 AUD")
        assert len(error.failures) == 2
        assert error.failure.assertion.account_id == "A"
        assert error.failure.actual_balance == c("0 AUD")
        assert error.failures[1].actual_balance == c("1 AUD")
        assert "and 1 more" in str(error)
        assert closed_state.failed_balance_assertions == error.failures

    def test_assertion_sees_start_of_day_balance(self, closed_state: ProgramState) -> None:
        """같은 날 거래 전 잔액으로 검증"""
        program = Program([
            Transaction.new_simple(None, d("2020-01-02"), "A", "B", c("1 AUD")),
            BalanceAssertion("A", d("2020-01-02"), c("0 AUD")),
            EditAccountStatus("A", AccountStatus.OPEN, d("2020-01-02")),
            EditAccountStatus("B", AccountStatus.OPEN, d("2020-01-02")),
        ])

        closed_state.execute_program(program)

        assert closed_state.account_states["A"].amount == c("-1 AUD")

    def test_cooperative_stop(self, closed_state: ProgramState, reference_program: Program) -> None:
        """중단 요청 시 다음 Action 전에 멈춤"""
        calls = {"count": 0}

        def should_stop() -> bool:
            calls["count"] += 1
            return calls["count"] > 2

        with pytest.raises(ExecutionStoppedError) as exc_info:
            closed_state.execute_program(reference_program, should_stop=should_stop)

        assert exc_info.value.next_index == 2
        assert closed_state.status == ExecutionStatus.HALTED
        assert closed_state.current_action_index == 1
        assert closed_state.account_states["A"].amount == c("0 AUD")

    def test_errors_share_base_class(self) -> None:
        for error_type in (
            BalanceAssertionFailedError,
            ExecutionStoppedError,
            InvalidAccountStatusError,
            MissingAccountError,
        ):
            assert issubclass(error_type, AccountingError)


class TestSumAccountStates:
    """sum_account_states 테스트"""

    def test_single_type(self, open_state: ProgramState) -> None:
        open_state.account_states["A"].amount = c("1.50 AUD")
        open_state.account_states["B"].amount = c("2.25 AUD")
        aud_states = {k: v for k, v in open_state.account_states.items() if k != "U"}

        assert sum_account_states(aud_states, "AUD") == c("3.75 AUD")

    def test_no_rate_supplied(self, open_state: ProgramState) -> None:
        open_state.account_states["U"].amount = c("1 USD")

        with pytest.raises(NoExchangeRateSuppliedError) as exc_info:
            sum_account_states(open_state.account_states, "AUD")

        assert exc_info.value.amount == c("1 USD")
        assert exc_info.value.target_type_id == "AUD"

    def test_with_rate(self, open_state: ProgramState) -> None:
        open_state.account_states["A"].amount = c("10 AUD")
        open_state.account_states["U"].amount = c("5 USD")
        rate = ExchangeRate(rates={"AUD": Decimal("1.5")}, base="USD")

        assert open_state.sum("AUD", rate) == c("17.5 AUD")
        assert open_state.sum("USD", rate).type_id == "USD"

    def test_missing_rate_entry(self, open_state: ProgramState) -> None:
        open_state.account_states["U"].amount = c("5 USD")
        rate = ExchangeRate(rates={"NZD": Decimal("1.5")}, base="EUR")

        with pytest.raises(ConversionError):
            open_state.sum("AUD", rate)

    def test_accepts_iterable(self, open_state: ProgramState) -> None:
        states = [open_state.account_states["A"], open_state.account_states["B"]]

        assert sum_account_states(states, "AUD") == c("0 AUD")
