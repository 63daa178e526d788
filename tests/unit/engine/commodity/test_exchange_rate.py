"""ExchangeRate 테스트"""

from datetime import date
from decimal import Decimal

import pytest

from engine.commodity import CodeNotPresentError, Commodity, ExchangeRate, ExchangeRateError
from engine.commodity.exchange_rate import divide, multiply


@pytest.fixture
def usd_base_rate() -> ExchangeRate:
    """base=USD, NOK 환율"""
    return ExchangeRate(
        rates={"NOK": Decimal("9.2691220713")},
        base="USD",
        date=date(2020, 2, 7),
    )


@pytest.fixture
def reference_rate() -> ExchangeRate:
    """base 없는 기준 환율 (AUD, NZD)"""
    return ExchangeRate(
        rates={"AUD": Decimal("1.6417"), "NZD": Decimal("1.7094")},
        date=date(2020, 2, 7),
    )


class TestConvertWithBase:
    """base 코드 기준 변환"""

    def test_base_to_target(self, usd_base_rate: ExchangeRate) -> None:
        """100 USD → NOK = 100 × rate"""
        result = usd_base_rate.convert(Commodity.from_str("100.0 USD"), "NOK")

        assert result.type_id == "NOK"
        assert result.value == Decimal("926.91220713")

    def test_source_to_base(self, usd_base_rate: ExchangeRate) -> None:
        """100 NOK → USD = 100 ÷ rate (절사)"""
        result = usd_base_rate.convert(Commodity.from_str("100.0 NOK"), "USD")

        assert result.type_id == "USD"
        assert result.value == Decimal("10.788508256853169187585300627")
        assert str(result.value) == "10.788508256853169187585300627"

    def test_missing_target(self, usd_base_rate: ExchangeRate) -> None:
        with pytest.raises(CodeNotPresentError) as exc_info:
            usd_base_rate.convert(Commodity.from_str("1 USD"), "EUR")

        assert exc_info.value.type_id == "EUR"

    def test_missing_source_to_base(self, usd_base_rate: ExchangeRate) -> None:
        with pytest.raises(CodeNotPresentError) as exc_info:
            usd_base_rate.convert(Commodity.from_str("1 EUR"), "USD")

        assert exc_info.value.type_id == "EUR"

    def test_neither_side_is_base(self) -> None:
        """양쪽 모두 base가 아니면 source → target 교차 변환"""
        rate = ExchangeRate(
            rates={"AUD": Decimal("1.6417"), "NZD": Decimal("1.7094")},
            base="USD",
        )

        result = rate.convert(Commodity.from_str("10.0 AUD"), "NZD")

        assert result.value == Decimal("10.412377413656575501005055735")


class TestConvertWithoutBase:
    """base 없는 변환"""

    def test_cross_conversion(self, reference_rate: ExchangeRate) -> None:
        """(10.0 ÷ 1.6417) × 1.7094: 나눗셈 절사 후 곱셈 반올림"""
        result = reference_rate.convert(Commodity.from_str("10.0 AUD"), "NZD")

        assert result.type_id == "NZD"
        assert str(result.value) == "10.412377413656575501005055735"

    def test_cross_conversion_reverse(self, reference_rate: ExchangeRate) -> None:
        """29자리 계수가 2**96을 넘으면 28자리로 반올림"""
        result = reference_rate.convert(Commodity.from_str("10.0 NZD"), "AUD")

        assert result.type_id == "AUD"
        assert str(result.value) == "9.603954603954603954603954604"

    def test_missing_source(self, reference_rate: ExchangeRate) -> None:
        with pytest.raises(CodeNotPresentError) as exc_info:
            reference_rate.convert(Commodity.from_str("1 USD"), "NZD")

        assert exc_info.value.type_id == "USD"

    def test_missing_target(self, reference_rate: ExchangeRate) -> None:
        with pytest.raises(CodeNotPresentError) as exc_info:
            reference_rate.convert(Commodity.from_str("1 AUD"), "USD")

        assert exc_info.value.type_id == "USD"

    def test_same_type_unchanged(self, reference_rate: ExchangeRate) -> None:
        value = Commodity.from_str("1.23 GBP")

        assert reference_rate.convert(value, "GBP") is value

    def test_code_not_present_is_exchange_rate_error(self) -> None:
        assert issubclass(CodeNotPresentError, ExchangeRateError)


class TestFixedPointArithmetic:
    """96비트 계수 / 소수 28자리 고정소수점 연산"""

    def test_divide_truncates(self) -> None:
        assert divide(Decimal("2"), Decimal("3")) == Decimal("0.6666666666666666666666666666")

    def test_divide_exact_drops_trailing_zeros(self) -> None:
        assert str(divide(Decimal("10"), Decimal("4"))) == "2.5"
        assert str(divide(Decimal("100"), Decimal("10"))) == "10"

    def test_multiply_keeps_exact_product(self) -> None:
        assert str(multiply(Decimal("100.0"), Decimal("1.5"))) == "150.00"

    def test_multiply_rounds_half_even(self) -> None:
        value = Decimal("0.0000000000000000000000000005")  # 소수 28자리

        assert multiply(value, Decimal("0.5")) == Decimal("0.0000000000000000000000000002")
        assert multiply(value, Decimal("0.3")) == Decimal("0.0000000000000000000000000002")

    def test_out_of_range(self) -> None:
        with pytest.raises(ExchangeRateError, match="out of range"):
            multiply(Decimal("1E+20"), Decimal("1E+20"))


class TestExchangeRateSerialization:
    """from_dict / to_dict 테스트"""

    def test_from_dict(self) -> None:
        rate = ExchangeRate.from_dict({
            "date": "2020-02-07",
            "base": "AUD",
            "rates": {"USD": 2.542, "EU": "1.234"},
        })

        assert rate.date == date(2020, 2, 7)
        assert rate.base == "AUD"
        assert rate.get_rate("USD") == Decimal("2.542")
        assert rate.get_rate("EU") == Decimal("1.234")
        assert rate.get_rate("NZD") is None

    def test_from_dict_invalid_rate(self) -> None:
        with pytest.raises(ExchangeRateError):
            ExchangeRate.from_dict({"rates": {"USD": "abc"}})

    def test_from_dict_non_positive_rate(self) -> None:
        with pytest.raises(ExchangeRateError):
            ExchangeRate.from_dict({"rates": {"USD": "0"}})

    def test_to_dict(self, usd_base_rate: ExchangeRate) -> None:
        data = usd_base_rate.to_dict()

        assert data["base"] == "USD"
        assert data["date"] == "2020-02-07"
        assert data["rates"] == {"NOK": "9.2691220713"}
        assert ExchangeRate.from_dict(data) == usd_base_rate

    def test_from_dict_non_finite_rate(self) -> None:
        with pytest.raises(ExchangeRateError):
            ExchangeRate.from_dict({"rates": {"USD": "NaN"}})
        with pytest.raises(ExchangeRateError):
            ExchangeRate.from_dict({"rates": {"USD": "Infinity"}})

    def test_from_dict_rates_not_mapping(self) -> None:
        with pytest.raises(ExchangeRateError, match="mapping"):
            ExchangeRate.from_dict({"rates": ["USD", "1.5"]})
