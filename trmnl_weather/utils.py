import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.typing import FilteringBoundLogger

logger = structlog.get_logger()


@contextmanager
def timed(
    event: str,
    *,
    logger: FilteringBoundLogger = logger,
    clock: Callable[[], float] = time.monotonic,
    **kwargs: Any,
) -> Iterator[None]:
    """
    Log how long the body took, in milliseconds, at debug level. The event
    is logged even if the body raises.
    """

    started = clock()
    try:
        yield
    finally:
        logger.debug(event, elapsed_ms=round((clock() - started) * 1000, 2), **kwargs)
