"""
Logging Configuration for the Payroll Calculation Engine
Provides console/file logging plus helpers for cache and calculation timing
"""

import logging
import logging.handlers
import os
import time
from typing import Optional


class PayrollLogFormatter(logging.Formatter):
    """Console formatter with colour-coded levels"""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        levelname = record.levelname
        color = self.COLORS.get(levelname, '')
        record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = levelname


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True,
    enable_file_rotation: bool = True
):
    """Setup logging configuration"""

    # Create logs directory if it doesn't exist
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {log_level}')

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_formatter = PayrollLogFormatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        if enable_file_rotation:
            # Rotating file handler (10MB max, keep 5 backups)
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5
            )
        else:
            file_handler = logging.FileHandler(log_file)

        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    loggers = [
        'payroll_engine.core.cache',
        'payroll_engine.core.error_handlers',
        'payroll_engine.core.middleware',
        'payroll_engine.payrolls.calculation',
        'payroll_engine.payrolls.registry',
        'payroll_engine.payrolls.service',
        'payroll_engine.payrolls.regions.india',
        'payroll_engine.payrolls.regions.philippines',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(numeric_level)

    return root_logger


def log_cache_operation(
    cache_name: str,
    key: str,
    hit: bool,
    logger: Optional[logging.Logger] = None
):
    """Log a reference-data cache lookup with standardized format"""

    if logger is None:
        logger = logging.getLogger('payroll_engine.core.cache')

    status_emoji = "🟢" if hit else "🟡"
    outcome = "HIT" if hit else "MISS"
    logger.debug(f"{status_emoji} REFERENCE CACHE - {cache_name.upper()}: {outcome} | key: {key}")


class PayrollOperationLogger:
    """Context manager that times and logs a payroll operation"""

    def __init__(
        self,
        operation: str,
        subject_id: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.operation = operation
        self.subject_id = subject_id
        self.logger = logger or logging.getLogger('payroll_engine.payrolls.service')
        self.start_time = None
        self.duration_ms = 0
        self.success = False
        self.details = {}

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.info(f"🟡 PAYROLL - {self.operation.upper()}: Starting for {self.subject_id}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = self.elapsed_ms()

        if exc_type is None:
            self.success = True
        else:
            self.details['error'] = str(exc_val)

        message_parts = [
            f"{'🟢' if self.success else '🔴'} PAYROLL - {self.operation.upper()}:",
            f"Subject: {self.subject_id}",
            f"Duration: {self.duration_ms}ms",
        ]
        for key, value in self.details.items():
            message_parts.append(f"{key}: {value}")

        message = " | ".join(message_parts)
        if self.success:
            self.logger.info(message)
        else:
            self.logger.error(message)

        # Never suppress the exception
        return False

    def elapsed_ms(self) -> int:
        """Milliseconds since the operation started"""
        if self.start_time is None:
            return 0
        return int((time.perf_counter() - self.start_time) * 1000)

    def add_detail(self, key: str, value):
        """Add additional details to the log"""
        self.details[key] = value
