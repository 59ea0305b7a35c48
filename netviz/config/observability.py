import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator

from netviz.config.settings import settings

logger = logging.getLogger("netviz")
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))


def _fields(kwargs: dict) -> str:
    return " ".join(f"{k}={v}" for k, v in kwargs.items())


@contextmanager
def timed(operation: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info("op=%s duration_ms=%.2f", operation, duration_ms)


def log_event(event: str, **kwargs: Any) -> None:
    logger.info("event=%s %s", event, _fields(kwargs))


def log_warning(event: str, **kwargs: Any) -> None:
    logger.warning("event=%s %s", event, _fields(kwargs))


def log_error(event: str, message: str, **kwargs: Any) -> None:
    logger.error("event=%s message=\"%s\" %s", event, message, _fields(kwargs))
