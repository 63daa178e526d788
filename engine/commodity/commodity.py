"""
Commodity 값 타입

Decimal 수량 + commodity type 코드 (예: "1.0 AUD").
서로 다른 type 간 연산은 CommodityError.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from engine.constants import Defaults


class CommodityError(Exception):
    """Commodity 연산/파싱 오류"""

    pass


class IncompatibleCommodityError(CommodityError):
    """서로 다른 commodity type 간 연산 시도"""

    def __init__(self, this: Commodity, other: Commodity, operation: str):
        self.this = this
        self.other = other
        self.operation = operation
        super().__init__(
            f"cannot {operation} commodities with different types: "
            f"{this.type_id} and {other.type_id}"
        )


def default_epsilon() -> Decimal:
    """근사 비교 기본 허용 오차"""
    return Defaults.EPSILON


def validate_type_id(type_id: str) -> str:
    """commodity type 코드 검증

    Raises:
        CommodityError: 비어 있거나 너무 긴 코드
    """
    if not isinstance(type_id, str) or not type_id.strip():
        raise CommodityError(f"invalid commodity type id: {type_id!r}")
    if len(type_id) > Defaults.TYPE_ID_MAX_LENGTH:
        raise CommodityError(
            f"commodity type id {type_id!r} is longer than "
            f"{Defaults.TYPE_ID_MAX_LENGTH} characters"
        )
    return type_id


@dataclass(frozen=True)
class Commodity:
    """commodity type이 지정된 Decimal 수량 (불변)

    동등 비교는 Decimal 값 기준 (Decimal("1.0") == Decimal("1.00")).
    """

    value: Decimal
    type_id: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            # int/str 허용, float은 정밀도 손실로 거부
            if isinstance(self.value, float):
                raise CommodityError(f"float value is not allowed: {self.value!r}")
            try:
                object.__setattr__(self, "value", Decimal(self.value))
            except (InvalidOperation, TypeError, ValueError) as e:
                raise CommodityError(f"invalid commodity value: {self.value!r}") from e
        if not self.value.is_finite():
            raise CommodityError(f"commodity value must be finite: {self.value}")
        validate_type_id(self.type_id)

    @classmethod
    def zero(cls, type_id: str) -> Commodity:
        """0 값 생성"""
        return cls(Decimal("0"), type_id)

    @classmethod
    def from_str(cls, text: str) -> Commodity:
        """"1.0 AUD" 형식 문자열 파싱

        Raises:
            CommodityError: 형식 오류
        """
        parts = text.split()
        if len(parts) != 2:
            raise CommodityError(
                f"expected '<value> <type_id>', got {text!r}"
            )
        value_str, type_id = parts
        try:
            value = Decimal(value_str)
        except InvalidOperation as e:
            raise CommodityError(f"invalid decimal value in {text!r}") from e
        return cls(value, type_id)

    def _check_compatible(self, other: Commodity, operation: str) -> None:
        if self.type_id != other.type_id:
            raise IncompatibleCommodityError(self, other, operation)

    def add(self, other: Commodity) -> Commodity:
        """type 검사 후 덧셈"""
        self._check_compatible(other, "add")
        return Commodity(self.value + other.value, self.type_id)

    def sub(self, other: Commodity) -> Commodity:
        """type 검사 후 뺄셈"""
        self._check_compatible(other, "subtract")
        return Commodity(self.value - other.value, self.type_id)

    def neg(self) -> Commodity:
        """부호 반전"""
        return Commodity(-self.value, self.type_id)

    def is_zero(self) -> bool:
        return self.value == 0

    def eq_approx(self, other: Commodity, epsilon: Decimal | None = None) -> bool:
        """허용 오차 내 동등 비교

        type이 다르면 항상 False.
        """
        if epsilon is None:
            epsilon = default_epsilon()
        if self.type_id != other.type_id:
            return False
        return abs(self.value - other.value) <= epsilon

    def __add__(self, other: Commodity) -> Commodity:
        return self.add(other)

    def __sub__(self, other: Commodity) -> Commodity:
        return self.sub(other)

    def __neg__(self) -> Commodity:
        return self.neg()

    def __str__(self) -> str:
        return f"{self.value} {self.type_id}"
