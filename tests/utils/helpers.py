"""
테스트 헬퍼

날짜/Commodity 생성 축약 함수
"""

from datetime import date

from engine.commodity import Commodity


def d(text: str) -> date:
    """ISO 날짜 문자열 → date"""
    return date.fromisoformat(text)


def c(text: str) -> Commodity:
    """"1.0 AUD" → Commodity"""
    return Commodity.from_str(text)
