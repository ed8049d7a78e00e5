"""
Loguru setup for the booking engine

One bound logger (`custom_logger`) carries the service context on every line.
Standard-library logging is bridged into it so third-party output shares the
same sinks and format.
"""

from contextvars import ContextVar
from datetime import datetime, timezone
from enum import StrEnum
import logging
import os
import sys
from typing import TYPE_CHECKING, Any

from loguru import logger as loguru_logger


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.constant.path import LOG_DIR
from src.platform.logging.service_context import get_service_context


# Guardian contact, child care notes and card data never reach a sink
SENSITIVE_KEYWORDS = frozenset(
    {
        'card_number',
        'cvc',
        'emergency_contact',
        'medical_info',
        'phone',
        'special_needs',
    }
)
MASK = '********'
DEPTH_LINE = '──'
MAX_CONTENT_LENGTH = 800

chain_started_at_var: ContextVar[float] = ContextVar('chain_started_at', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth', default=0)


class LogField(StrEnum):
    SERVICE = 'service_context'
    CHAIN_STARTED = 'chain_start_time'
    TARGET = 'call_target'


def bind_defaults(base: 'LoguruLogger') -> 'LoguruLogger':
    return base.bind(
        **{
            LogField.SERVICE: get_service_context(),
            LogField.CHAIN_STARTED: '',
            LogField.TARGET: '',
        }
    )


LOG_FORMAT = ' | '.join(
    (
        f'<c>{{extra[{LogField.SERVICE}]}}</>',
        '<lvl>{level:<8}</>',
        f'<c>{{file}}::{{function}}:{{line}}</>=><y>{{extra[{LogField.TARGET}]}}</>',
        '{message}',
        '<lk>{elapsed}</>',
        f'<lk>{{extra[{LogField.CHAIN_STARTED}]:<18}}</>',
    )
)

# Debug chatter from the event loop adds nothing to booking logs
_QUIET_STDLIB_MESSAGES = ('Using selector:',)


class StdlibBridge(logging.Handler):
    """Forward `logging` records into loguru, keeping the original caller"""

    def __init__(self, target: 'LoguruLogger') -> None:
        super().__init__()
        self.target = target

    def emit(self, record: logging.LogRecord) -> None:
        message = record.getMessage()
        if record.levelno <= logging.DEBUG and message.startswith(_QUIET_STDLIB_MESSAGES):
            return

        level: str | int
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1
        self.target.opt(depth=depth, exception=record.exc_info).log(level, message)


def _log_file_path() -> str:
    # Test runs write next to each other in their own directory
    test_dir = os.environ.get('TEST_LOG_DIR')
    stamp = datetime.now(timezone.utc).strftime('%Y-%m-%d_%H')
    prefix = 'test_booking' if test_dir else 'booking'
    return f'{test_dir or LOG_DIR}/{prefix}_{stamp}.log'


def configure_logging() -> 'LoguruLogger':
    level = 'DEBUG' if settings.DEBUG else 'INFO'
    sink_options: dict[str, Any] = {'format': LOG_FORMAT, 'level': level, 'enqueue': True}

    loguru_logger.remove()
    bound = bind_defaults(loguru_logger)
    bound.add(sys.stdout, **sink_options)
    if settings.DEBUG:
        bound.add(
            _log_file_path(),
            rotation='1 hour',
            retention='7 days',
            compression='gz',
            **sink_options,
        )

    logging.basicConfig(handlers=[StdlibBridge(bound)], level=0, force=True)
    return bound


custom_logger = configure_logging()
