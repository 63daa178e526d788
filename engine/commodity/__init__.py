"""
Commodity 시스템

Decimal 수량 + type 코드 값 타입과 보고용 환율 테이블.
"""

from engine.commodity.commodity import (
    Commodity,
    CommodityError,
    IncompatibleCommodityError,
    default_epsilon,
)
from engine.commodity.exchange_rate import (
    CodeNotPresentError,
    ExchangeRate,
    ExchangeRateError,
)

__all__ = [
    "Commodity",
    "CommodityError",
    "IncompatibleCommodityError",
    "default_epsilon",
    "ExchangeRate",
    "ExchangeRateError",
    "CodeNotPresentError",
]
