"""
계정 정의

- Account: 불변 계정 정보 (ID 기준 동등 비교)
- AccountRegistry: ID → Account 저장소
- AccountState: 계정별 가변 잔액/상태
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Iterator
from uuid import uuid4

from engine.commodity import Commodity, default_epsilon
from engine.commodity.commodity import validate_type_id
from engine.constants import Defaults
from engine.ledger.errors import DuplicateAccountError, MissingAccountError
from engine.types import AccountStatus


def generate_account_id() -> str:
    """Defaults.ACCOUNT_ID_LENGTH 길이의 무작위 계정 ID"""
    return uuid4().hex[: Defaults.ACCOUNT_ID_LENGTH]


@dataclass(frozen=True, eq=False)
class Account:
    """계정 (불변)

    commodity_type_id 타입의 Commodity를 보유.
    동등 비교와 hash는 id 기준.
    """

    id: str
    commodity_type_id: str
    name: str | None = None
    category: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("account id must not be empty")
        validate_type_id(self.commodity_type_id)

    @classmethod
    def create(
        cls,
        commodity_type_id: str,
        name: str | None = None,
        category: str | None = None,
    ) -> Account:
        """ID 자동 생성"""
        return cls(
            id=generate_account_id(),
            commodity_type_id=commodity_type_id,
            name=name,
            category=category,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Account):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환 (직렬화용)"""
        return {
            "id": self.id,
            "name": self.name,
            "commodity_type_id": self.commodity_type_id,
            "category": self.category,
        }


class AccountRegistry:
    """계정 저장소

    등록 순서를 유지하는 ID → Account 매핑.
    AccountState는 ID만 보관하고 Account는 여기서 조회한다.
    """

    def __init__(self, accounts: Iterable[Account] = ()):
        self._accounts: dict[str, Account] = {}
        for account in accounts:
            self.register(account)

    def register(self, account: Account) -> Account:
        """계정 등록

        Raises:
            DuplicateAccountError: 같은 ID가 이미 등록된 경우
        """
        if account.id in self._accounts:
            raise DuplicateAccountError(account.id)
        self._accounts[account.id] = account
        return account

    def get(self, account_id: str) -> Account | None:
        return self._accounts.get(account_id)

    def require(self, account_id: str) -> Account:
        """계정 조회 (없으면 MissingAccountError)"""
        account = self._accounts.get(account_id)
        if account is None:
            raise MissingAccountError(account_id)
        return account

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._accounts

    def __iter__(self) -> Iterator[Account]:
        return iter(self._accounts.values())

    def __len__(self) -> int:
        return len(self._accounts)

    def ids(self) -> list[str]:
        return list(self._accounts)


@dataclass
class AccountState:
    """계정별 가변 상태

    amount는 항상 계정의 commodity type을 가진다.
    ProgramState 수명 동안 교체/삭제되지 않고 제자리에서 변경된다.
    """

    account_id: str
    amount: Commodity
    status: AccountStatus

    @classmethod
    def initial(cls, account: Account, status: AccountStatus) -> AccountState:
        """잔액 0으로 생성"""
        return cls(
            account_id=account.id,
            amount=Commodity.zero(account.commodity_type_id),
            status=status,
        )

    @property
    def type_id(self) -> str:
        return self.amount.type_id

    def open(self) -> None:
        self.status = AccountStatus.OPEN

    def close(self) -> None:
        self.status = AccountStatus.CLOSED

    def eq_approx(self, other: AccountState, epsilon: Decimal | None = None) -> bool:
        """계정/상태 동일 + 잔액 허용 오차 내 일치"""
        if epsilon is None:
            epsilon = default_epsilon()
        return (
            self.account_id == other.account_id
            and self.status == other.status
            and self.amount.eq_approx(other.amount, epsilon)
        )
