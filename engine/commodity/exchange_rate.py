"""
환율 테이블

commodity type 코드 → 환율 매핑. base 코드를 지정하면 base 기준 환율로 해석.
거래 처리(Transaction)에는 사용하지 않고 합계 보고용 변환에만 사용.

변환 결과는 96비트 계수 / 소수 28자리 이하 고정소수점으로 맞춘다
(나눗셈 절사, 곱셈 ROUND_HALF_EVEN).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_DOWN, ROUND_HALF_EVEN, Context, Decimal, InvalidOperation
from typing import Any, Mapping

from engine.commodity.commodity import Commodity
from engine.constants import Precision


# 중간 계산용 (곱셈은 정확, 나눗셈은 충분한 자릿수에서 절사)
WORKING_CONTEXT = Context(prec=80, rounding=ROUND_DOWN)

# 96비트 계수로 표현 가능한 최대 자릿수 (29)
_MAX_DIGITS = len(str(Precision.COEFFICIENT_LIMIT))


class ExchangeRateError(Exception):
    """환율 관련 오류"""

    pass


class CodeNotPresentError(ExchangeRateError):
    """환율 테이블에 코드가 없음"""

    def __init__(self, type_id: str):
        self.type_id = type_id
        super().__init__(f"the commodity type {type_id} is not present in the exchange rate")


def _fit(value: Decimal, rounding: str) -> Decimal:
    """계수 < 2**96, 소수 자릿수 <= 28을 만족하는 가장 큰 소수 자릿수로 맞춤

    Raises:
        ExchangeRateError: 정수부만으로도 범위를 넘는 경우
    """
    exponent = value.as_tuple().exponent
    scale = min(Precision.MAX_SCALE, max(-exponent, 0), _MAX_DIGITS - 1 - value.adjusted())
    while scale >= 0:
        fitted = value.quantize(
            Decimal(1).scaleb(-scale), rounding=rounding, context=WORKING_CONTEXT
        )
        coefficient = int("".join(map(str, fitted.as_tuple().digits)))
        if coefficient < Precision.COEFFICIENT_LIMIT:
            return fitted
        scale -= 1
    raise ExchangeRateError(f"conversion result out of range: {value}")


def divide(dividend: Decimal, divisor: Decimal) -> Decimal:
    """나눗셈 (절사, 끝자리 0 제거)"""
    quotient = _fit(WORKING_CONTEXT.divide(dividend, divisor), ROUND_DOWN)
    normalized = quotient.normalize(WORKING_CONTEXT)
    if normalized.as_tuple().exponent > 0:
        return quotient.quantize(Decimal(1), context=WORKING_CONTEXT)
    return normalized


def multiply(value: Decimal, rate: Decimal) -> Decimal:
    """곱셈 (ROUND_HALF_EVEN)"""
    return _fit(WORKING_CONTEXT.multiply(value, rate), ROUND_HALF_EVEN)


@dataclass
class ExchangeRate:
    """환율 테이블

    rates[code] = 1 base 당 code 수량 (base가 없으면 공통 기준 대비 비율).

    예: base="USD", rates={"NOK": 9.2691220713}
        100 USD → 926.91220713 NOK
        100 NOK → 10.788508256853169187585300627 USD
    """

    rates: dict[str, Decimal] = field(default_factory=dict)
    base: str | None = None
    date: date | None = None
    obtained_datetime: datetime | None = None

    def get_rate(self, type_id: str) -> Decimal | None:
        """코드의 환율 조회 (없으면 None)"""
        return self.rates.get(type_id)

    def _require_rate(self, type_id: str) -> Decimal:
        rate = self.get_rate(type_id)
        if rate is None:
            raise CodeNotPresentError(type_id)
        return rate

    def convert(self, amount: Commodity, target_type_id: str) -> Commodity:
        """amount를 target_type_id로 변환

        Raises:
            CodeNotPresentError: 필요한 환율이 테이블에 없음
        """
        if amount.type_id == target_type_id:
            return amount

        if self.base is not None:
            if amount.type_id == self.base:
                rate = self._require_rate(target_type_id)
                return Commodity(multiply(amount.value, rate), target_type_id)

            if target_type_id == self.base:
                rate = self._require_rate(amount.type_id)
                return Commodity(divide(amount.value, rate), target_type_id)

        # base가 없거나 양쪽 모두 base가 아닌 경우: source → 기준 → target
        source_rate = self._require_rate(amount.type_id)
        target_rate = self._require_rate(target_type_id)
        value = multiply(divide(amount.value, source_rate), target_rate)
        return Commodity(value, target_type_id)

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환 (직렬화용)"""
        return {
            "date": self.date.isoformat() if self.date else None,
            "obtained_datetime": (
                self.obtained_datetime.isoformat() if self.obtained_datetime else None
            ),
            "base": self.base,
            "rates": {code: str(rate) for code, rate in self.rates.items()},
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ExchangeRate:
        """딕셔너리에서 생성 (역직렬화용)

        rates 값은 숫자 또는 decimal 문자열 허용.

        Raises:
            ExchangeRateError: 환율 값이 유효하지 않은 경우
        """
        raw_rates = data.get("rates") or {}
        if not isinstance(raw_rates, Mapping):
            raise ExchangeRateError(f"rates must be a mapping, got {type(raw_rates).__name__}")

        rates: dict[str, Decimal] = {}
        for code, raw in raw_rates.items():
            try:
                rate = Decimal(str(raw))
            except InvalidOperation as e:
                raise ExchangeRateError(f"invalid rate for {code}: {raw!r}") from e
            if not rate.is_finite() or rate <= 0:
                raise ExchangeRateError(f"rate for {code} must be a positive number: {rate}")
            rates[code] = rate

        rate_date = data.get("date")
        if isinstance(rate_date, str):
            rate_date = date.fromisoformat(rate_date)

        obtained = data.get("obtained_datetime")
        if isinstance(obtained, str):
            obtained = datetime.fromisoformat(obtained)

        return ExchangeRate(
            rates=rates,
            base=data.get("base"),
            date=rate_date,
            obtained_datetime=obtained,
        )
