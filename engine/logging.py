"""
로깅 설정 유틸리티

Runner와 라이브러리 사용자가 공통으로 쓰는 로깅 설정.
- 콘솔: settings의 log_level
- 파일: DEBUG (Action 단위 실행 기록 포함, daily rotation)

사용법:
    from engine.logging import setup_logging
    setup_logging("runner", console_level=resolve_level("INFO"))
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from engine.constants import Paths


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7  # 최대 7일치 파일 유지

# Action마다 DEBUG 로그를 남기는 로거 (trace_actions=False면 INFO로 제한)
ACTION_TRACE_LOGGER = "engine.ledger.actions"

# 엔진이 직접 쓰지 않는 라이브러리 로거 (WARNING 이상만)
NOISY_LOGGERS = [
    "pydantic",
    "yaml",
]


def resolve_level(level: str | int) -> int:
    """로그 레벨 이름/숫자 → logging 레벨 숫자

    Raises:
        ValueError: 알 수 없는 레벨 이름
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"unknown log level: {level!r}")
    return value


def get_log_file_path(process_name: str, log_dir: Path | None = None) -> Path:
    """프로세스 로그 파일 경로 (log_dir 기본값: Paths.LOGS_DIR)"""
    return (log_dir or Paths.LOGS_DIR) / f"{process_name}.log"


def setup_logging(
    process_name: str,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    log_dir: Path | None = None,
    trace_actions: bool = True,
) -> logging.Logger:
    """루트 로거 초기화

    기존 핸들러는 닫고 제거한 뒤 콘솔/파일 핸들러를 새로 붙인다.
    여러 번 호출해도 핸들러가 중복되지 않는다.

    Args:
        process_name: 로그 파일 이름 ("runner" → runner.log)
        console_level: 콘솔 핸들러 레벨
        file_level: 파일 핸들러 레벨
        log_dir: 로그 디렉토리 (None이면 Paths.LOGS_DIR)
        trace_actions: False면 Action 단위 DEBUG 로그 생략

    Returns:
        설정된 루트 Logger
    """
    log_file = get_log_file_path(process_name, log_dir)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.suffix = "%Y-%m-%d"  # runner.log.2026-02-21
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(ACTION_TRACE_LOGGER).setLevel(
        logging.NOTSET if trace_actions else logging.INFO
    )

    root_logger.debug(
        f"로깅 초기화 완료: {process_name} "
        f"(console={logging.getLevelName(console_level)}, "
        f"file={log_file} {logging.getLevelName(file_level)})"
    )
    return root_logger
