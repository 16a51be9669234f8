import json
import logging
import sys
from typing import Any

from loguru import logger

from group_membership import settings

LEVEL_ICONS = {
    logging.DEBUG: '🔬',
    logging.WARNING: '⚠️',
    logging.ERROR: '💣💥',
    logging.CRITICAL: '🚨',
}
DEFAULT_LEVEL_ICON = '✏️'


class InterceptHandler(logging.Handler):
    """
    Routes stdlib logging (redis, sqlalchemy, ...) into loguru, following the
    recipe from the loguru documentation:
    https://loguru.readthedocs.io/en/stable/overview.html#entirely-compatible-with-standard-logging
    """

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def deployed_log_formatter(record: dict[str, Any]) -> str:
    """
    One JSON object per line, for log shippers
    """
    extra = record['extra']
    if record['exception'] is not None:
        exc = record['exception']
        record['exception'] = None
        extra['error'] = {
            'exception_type': type(exc.value).__name__,
            'message': str(exc.value),
            'context': getattr(exc.value, 'context', None),
        }

    extra.update(
        timestamp=record['time'].strftime('%Y-%m-%dT%H:%M:%S,%f'),
        message=record['message'],
        level=record['level'].name,
        logger=record['name'],
        function=record['function'],
    )
    extra['serialized'] = json.dumps(extra, default=str)
    return '{extra[serialized]}\n'


def local_log_formatter(record: dict[str, Any]) -> str:
    icon = LEVEL_ICONS.get(record['level'].no, DEFAULT_LEVEL_ICON)
    log_format = (
        '<green>{time:HH:mm:ss.SSS}</green> '
        f'| {icon} '
        ' <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> '
        '- <level>{message}</level>\n'
    )
    if record['exception'] is not None:
        log_format += '{exception}\n'
    return log_format


def configure_logging(level: str | None = None):
    """
    Send every log record, loguru's and stdlib's, to stdout. Deployed
    environments log JSON, everything else logs for a human.
    """
    level = level or settings.LOG_LEVEL

    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(level)
    for name in logging.root.manager.loggerDict:
        library_logger = logging.getLogger(name)
        library_logger.handlers = []
        library_logger.propagate = True

    logger.remove()
    logger.add(
        sys.stdout,
        backtrace=False,
        diagnose=settings.DEBUG,
        level=level,
        format=deployed_log_formatter if settings.IS_DEPLOYED_ENV else local_log_formatter,
    )
    logger.debug(f'logging level: {level}')
