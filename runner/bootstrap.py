"""
Runner Bootstrap

설정 로드, 계정/Program 로드, 실행, 결과 출력.

사용법:
    python -m runner program.json --accounts accounts.yaml
    python -m runner program.json --accounts accounts.yaml --rates rates.yaml --report-type AUD
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from engine.commodity import ExchangeRate, ExchangeRateError
from engine.config.loader import ConfigLoadError, Settings, get_settings
from engine.ledger import (
    AccountingError,
    BalanceAssertionFailedError,
    ProgramState,
)
from engine.ledger.schema import ProgramLoadError, load_accounts, load_program_json
from engine.logging import resolve_level, setup_logging

logger = logging.getLogger("runner")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ASSERTION_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="runner",
        description="복식부기 Program 실행 (계정 잔액 계산 및 검증)",
    )
    parser.add_argument("program", type=Path, help="Program JSON 파일")
    parser.add_argument(
        "--accounts",
        type=Path,
        required=True,
        help="계정 목록 파일 (YAML/JSON)",
    )
    parser.add_argument(
        "--rates",
        type=Path,
        default=None,
        help="환율 테이블 파일 (YAML/JSON, 합계 보고용)",
    )
    parser.add_argument(
        "--report-type",
        default=None,
        help="합계 보고 commodity type (기본: settings의 report_type_id)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="settings.yaml 경로 (기본: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="로그 디렉토리 (기본: logs/)",
    )
    parser.add_argument(
        "--no-trace",
        action="store_true",
        help="Action 단위 DEBUG 로그 생략",
    )
    return parser


def read_structured_file(path: Path) -> Any:
    """YAML/JSON 파일 로드 (JSON은 YAML의 부분집합)

    Raises:
        ProgramLoadError: 파일이 없거나 UTF-8이 아니거나 파싱 실패
    """
    if not path.exists():
        raise ProgramLoadError(f"file not found: {path}")
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise ProgramLoadError(f"{path} is not valid UTF-8: {e}") from e
    except yaml.YAMLError as e:
        raise ProgramLoadError(f"failed to parse {path}: {e}") from e


def load_exchange_rate(path: Path) -> ExchangeRate:
    data = read_structured_file(path)
    if not isinstance(data, dict):
        raise ProgramLoadError(f"exchange rate file {path} must contain a mapping")
    try:
        return ExchangeRate.from_dict(data)
    except (ExchangeRateError, ValueError) as e:
        raise ProgramLoadError(f"invalid exchange rate file {path}: {e}") from e


def print_report(state: ProgramState, report_type: str | None, rates: ExchangeRate | None) -> None:
    """계정별 최종 잔액과 합계 출력"""
    print("Account balances:")
    for account in state.registry:
        account_state = state.account_states[account.id]
        label = account.name or account.id
        print(f"  {label:<30} {str(account_state.amount):>24}  [{account_state.status.value}]")

    if report_type is not None:
        total = state.sum(report_type, rates)
        print(f"Total ({report_type}): {total}")


def run(args: argparse.Namespace, settings: Settings) -> int:
    """Program 실행

    Returns:
        종료 코드 (0: 성공, 1: 오류, 2: 잔액 검증 실패)
    """
    try:
        accounts = load_accounts(read_structured_file(args.accounts))
        if not args.program.exists():
            raise ProgramLoadError(f"file not found: {args.program}")
        program = load_program_json(args.program.read_bytes())
        rates = load_exchange_rate(args.rates) if args.rates else None
    except ProgramLoadError as e:
        logger.error(f"입력 로드 실패: {e}")
        return EXIT_ERROR

    logger.info(f"로드 완료: 계정 {len(accounts)}개, Action {len(program)}개")

    exit_code = EXIT_OK
    try:
        state = ProgramState(
            accounts,
            settings.initial_account_status,
            default_epsilon=settings.default_epsilon,
        )
        state.execute_program(program)
    except BalanceAssertionFailedError as e:
        for failure in e.failures:
            logger.error(f"잔액 검증 실패: {failure}")
        exit_code = EXIT_ASSERTION_FAILED
    except AccountingError as e:
        logger.error(f"실행 중단: {e}")
        return EXIT_ERROR

    report_type = args.report_type or settings.report_type_id
    try:
        print_report(state, report_type, rates)
    except AccountingError as e:
        logger.error(f"합계 계산 실패: {e}")
        return EXIT_ERROR

    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Runner 메인 함수"""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings(args.config)
    except ConfigLoadError as e:
        print(f"설정 로드 실패: {e}", file=sys.stderr)
        return EXIT_ERROR

    setup_logging(
        "runner",
        console_level=resolve_level(settings.log_level),
        log_dir=args.log_dir,
        trace_actions=not args.no_trace,
    )

    return run(args, settings)
