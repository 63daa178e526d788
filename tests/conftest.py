"""
pytest 공통 fixture 정의

계정, ProgramState, 임시 파일 fixture
"""

import tempfile
from pathlib import Path

import pytest

from engine.ledger import Account, ProgramState
from engine.types import AccountStatus


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def account_a() -> Account:
    return Account("A", "AUD", name="Account A")


@pytest.fixture
def account_b() -> Account:
    return Account("B", "AUD", name="Account B")


@pytest.fixture
def account_usd() -> Account:
    return Account("U", "USD", name="USD Account")


@pytest.fixture
def open_state(account_a: Account, account_b: Account, account_usd: Account) -> ProgramState:
    """모든 계정이 Open인 ProgramState"""
    return ProgramState([account_a, account_b, account_usd], AccountStatus.OPEN)


@pytest.fixture
def closed_state(account_a: Account, account_b: Account) -> ProgramState:
    """모든 계정이 Closed인 ProgramState (AUD 계정 2개)"""
    return ProgramState([account_a, account_b], AccountStatus.CLOSED)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    content = """# 테스트용 settings.yaml
default_epsilon: "0.01"
initial_account_status: Open
report_type_id: AUD
log_level: debug
"""
    path = temp_dir / "settings.yaml"
    path.write_text(content, encoding="utf-8")
    return path
