"""
로깅 시스템
파일 및 콘솔 로깅, 디버그 모드 지원
"""

import logging
import os
from datetime import datetime
from typing import Optional
from rich.logging import RichHandler
from rich.console import Console

console = Console(stderr=True)

DEFAULT_LOG_DIR = "~/.anet-quickstart/logs"


class QuickstartLogger:
    """anet-quickstart 로거"""

    def __init__(self, log_dir: str = DEFAULT_LOG_DIR, log_level: str = "INFO", debug: bool = False):
        self.log_dir = os.path.expanduser(log_dir)
        self.log_level = logging.DEBUG if debug else getattr(logging, log_level.upper())
        self.debug_mode = debug

        os.makedirs(self.log_dir, exist_ok=True)

        # 실행마다 별도 로그 파일
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.log_file = os.path.join(self.log_dir, f"quickstart_{timestamp}.log")
        self.error_file = os.path.join(self.log_dir, f"error_{timestamp}.log")

        self.logger = logging.getLogger("anet_quickstart")
        self.logger.setLevel(self.log_level)
        self.logger.propagate = False

        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
        file_handler.setLevel(self.log_level)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        self.logger.addHandler(file_handler)

        error_handler = logging.FileHandler(self.error_file, encoding='utf-8')
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(file_formatter)
        self.logger.addHandler(error_handler)

        # 콘솔에는 디버그 모드일 때만 상세 로그 출력 (사용자 메시지는 CLI가 담당)
        rich_handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            show_time=False,
            show_path=debug
        )
        rich_handler.setLevel(logging.DEBUG if debug else logging.CRITICAL)
        self.logger.addHandler(rich_handler)

    def debug(self, message: str):
        self.logger.debug(message)

    def info(self, message: str):
        self.logger.info(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str):
        self.logger.error(message)


_logger: Optional[QuickstartLogger] = None


def get_logger() -> QuickstartLogger:
    """로거 인스턴스 가져오기"""
    global _logger
    if _logger is None:
        _logger = QuickstartLogger()
    return _logger


def init_logger(log_dir: str, log_level: str = "INFO", debug: bool = False) -> QuickstartLogger:
    """로거 초기화"""
    global _logger
    _logger = QuickstartLogger(log_dir, log_level, debug)
    return _logger
