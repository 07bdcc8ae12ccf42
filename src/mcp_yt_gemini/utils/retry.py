"""Retry for driver calls that fail while Chrome reshuffles its tabs."""

import time
from typing import Callable, Tuple, Type, TypeVar

from selenium.common.exceptions import WebDriverException

import logging
logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_op(
    fn: Callable[[], T],
    retries: int = 2,
    delay: float = 0.15,
    retry_on: Tuple[Type[BaseException], ...] = (WebDriverException,),
) -> T:
    """Call `fn`, retrying up to `retries` times on `retry_on`; the last error propagates."""
    attempt = 0
    while True:
        try:
            return fn()
        except retry_on as e:
            if attempt >= retries:
                raise
            attempt += 1
            logger.debug(f"Retrying driver call after {type(e).__name__} ({attempt}/{retries})")
            time.sleep(delay * attempt)


__all__ = ["retry_op"]
