"""
Program 외부 표현 스키마 (Pydantic)

태그된 Action 객체 배열 (JSON). 배열 순서는 의미가 없으며
로드 시 Program 생성 과정에서 다시 정렬된다.

    [
        {"type": "EditAccountStatus", "account_id": "A", "newstatus": "Open", "date": "2020-01-01"},
        {"type": "BalanceAssertion", "account_id": "A", "date": "2020-01-03",
         "expected_balance": {"value": "-3.52", "type_id": "AUD"}},
        {"type": "Transaction", "description": "...", "date": "2020-01-02",
         "elements": [{"account_id": "A", "amount": {"value": "-1.0", "type_id": "AUD"}},
                      {"account_id": "B"}]}
    ]
"""

import datetime
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from engine.commodity import Commodity, CommodityError, ExchangeRate, ExchangeRateError
from engine.ledger.account import Account
from engine.ledger.actions import (
    Action,
    BalanceAssertion,
    EditAccountStatus,
    Transaction,
    TransactionElement,
)
from engine.ledger.program import Program
from engine.types import AccountStatus, ActionKind


class ProgramLoadError(Exception):
    """Program/계정 외부 표현 로드 실패 예외"""

    pass


def _check_decimal(value: str) -> str:
    try:
        parsed = Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"invalid decimal value: {value!r}") from e
    if not parsed.is_finite():
        raise ValueError(f"decimal value must be finite: {value!r}")
    return value


class CommodityModel(BaseModel):
    """Commodity 표현"""

    value: str = Field(..., description="decimal 문자열")
    type_id: str = Field(..., description="commodity type 코드")

    @field_validator("value")
    @classmethod
    def _validate_value(cls, v: str) -> str:
        return _check_decimal(v)

    def to_commodity(self) -> Commodity:
        return Commodity(Decimal(self.value), self.type_id)

    @classmethod
    def from_commodity(cls, commodity: Commodity) -> "CommodityModel":
        return cls(value=str(commodity.value), type_id=commodity.type_id)


class TransactionElementModel(BaseModel):
    """거래 요소 표현 (amount 생략 가능)"""

    account_id: str
    amount: CommodityModel | None = None
    exchange_rate: dict[str, Any] | None = None


class EditAccountStatusModel(BaseModel):
    """EditAccountStatus 표현"""

    type: Literal["EditAccountStatus"] = ActionKind.EDIT_ACCOUNT_STATUS.value
    account_id: str
    newstatus: AccountStatus
    date: datetime.date


class BalanceAssertionModel(BaseModel):
    """BalanceAssertion 표현"""

    type: Literal["BalanceAssertion"] = ActionKind.BALANCE_ASSERTION.value
    account_id: str
    date: datetime.date
    expected_balance: CommodityModel
    epsilon: str | None = Field(default=None, description="허용 오차 (생략 시 기본값)")

    @field_validator("epsilon")
    @classmethod
    def _validate_epsilon(cls, v: str | None) -> str | None:
        return None if v is None else _check_decimal(v)


class TransactionModel(BaseModel):
    """Transaction 표현"""

    type: Literal["Transaction"] = ActionKind.TRANSACTION.value
    description: str | None = None
    date: datetime.date
    elements: list[TransactionElementModel]


ActionModel = Annotated[
    Union[EditAccountStatusModel, BalanceAssertionModel, TransactionModel],
    Field(discriminator="type"),
]


class AccountModel(BaseModel):
    """계정 표현"""

    id: str
    commodity_type_id: str
    name: str | None = None
    category: str | None = None


_PROGRAM_ADAPTER = TypeAdapter(list[ActionModel])
_ACCOUNTS_ADAPTER = TypeAdapter(list[AccountModel])


def _to_action(model: Any) -> Action:
    """표현 모델 → Action"""
    if isinstance(model, EditAccountStatusModel):
        return EditAccountStatus(
            account_id=model.account_id,
            newstatus=model.newstatus,
            date=model.date,
        )
    if isinstance(model, BalanceAssertionModel):
        return BalanceAssertion(
            account_id=model.account_id,
            date=model.date,
            expected_balance=model.expected_balance.to_commodity(),
            epsilon=Decimal(model.epsilon) if model.epsilon is not None else None,
        )
    if isinstance(model, TransactionModel):
        return Transaction(
            date=model.date,
            description=model.description,
            elements=tuple(
                TransactionElement(
                    account_id=element.account_id,
                    amount=element.amount.to_commodity() if element.amount else None,
                    exchange_rate=(
                        ExchangeRate.from_dict(element.exchange_rate)
                        if element.exchange_rate is not None
                        else None
                    ),
                )
                for element in model.elements
            ),
        )
    raise TypeError(f"unsupported action model: {type(model).__name__}")


def _from_action(action: Action) -> BaseModel:
    """Action → 표현 모델"""
    if isinstance(action, EditAccountStatus):
        return EditAccountStatusModel(
            account_id=action.account_id,
            newstatus=action.newstatus,
            date=action.date,
        )
    if isinstance(action, BalanceAssertion):
        return BalanceAssertionModel(
            account_id=action.account_id,
            date=action.date,
            expected_balance=CommodityModel.from_commodity(action.expected_balance),
            epsilon=str(action.epsilon) if action.epsilon is not None else None,
        )
    if isinstance(action, Transaction):
        return TransactionModel(
            description=action.description,
            date=action.date,
            elements=[
                TransactionElementModel(
                    account_id=element.account_id,
                    amount=(
                        CommodityModel.from_commodity(element.amount)
                        if element.amount is not None
                        else None
                    ),
                    exchange_rate=(
                        element.exchange_rate.to_dict()
                        if element.exchange_rate is not None
                        else None
                    ),
                )
                for element in action.elements
            ],
        )
    raise TypeError(f"unsupported action: {type(action).__name__}")


def load_program(data: Any) -> Program:
    """파싱된 JSON 데이터(list)에서 Program 생성

    Raises:
        ProgramLoadError: 형식 오류
    """
    try:
        models = _PROGRAM_ADAPTER.validate_python(data)
        return Program(_to_action(model) for model in models)
    except ValidationError as e:
        raise ProgramLoadError(f"invalid program: {e}") from e
    except (CommodityError, ExchangeRateError, ValueError) as e:
        raise ProgramLoadError(f"invalid program value: {e}") from e


def load_program_json(text: str | bytes) -> Program:
    """JSON 문자열에서 Program 생성

    Raises:
        ProgramLoadError: JSON 또는 형식 오류
    """
    try:
        models = _PROGRAM_ADAPTER.validate_json(text)
        return Program(_to_action(model) for model in models)
    except ValidationError as e:
        raise ProgramLoadError(f"invalid program: {e}") from e
    except (CommodityError, ExchangeRateError, ValueError) as e:
        raise ProgramLoadError(f"invalid program value: {e}") from e


def dump_program(program: Program) -> list[dict[str, Any]]:
    """Program → JSON 호환 list (정렬된 순서)"""
    return [
        _from_action(action).model_dump(mode="json", exclude_none=True)
        for action in program
    ]


def dump_program_json(program: Program, indent: int | None = 2) -> str:
    """Program → JSON 문자열"""
    models = [_from_action(action) for action in program]
    return _PROGRAM_ADAPTER.dump_json(models, indent=indent, exclude_none=True).decode("utf-8")


def load_accounts(data: Any) -> list[Account]:
    """계정 목록 로드

    Raises:
        ProgramLoadError: 형식 오류
    """
    try:
        models = _ACCOUNTS_ADAPTER.validate_python(data)
        return [
            Account(
                id=model.id,
                commodity_type_id=model.commodity_type_id,
                name=model.name,
                category=model.category,
            )
            for model in models
        ]
    except ValidationError as e:
        raise ProgramLoadError(f"invalid accounts: {e}") from e
    except (CommodityError, ValueError) as e:
        raise ProgramLoadError(f"invalid account value: {e}") from e


def dump_accounts(accounts: Any) -> list[dict[str, Any]]:
    """계정 목록 → JSON 호환 list"""
    return [
        AccountModel(**account.to_dict()).model_dump(mode="json", exclude_none=True)
        for account in accounts
    ]
