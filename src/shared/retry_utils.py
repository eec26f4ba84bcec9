import time
from typing import Callable, Tuple, TypeVar

T = TypeVar("T")


def retry_with_backoff(
    operation: Callable[[], T],
    *,
    attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 1.5,
    exceptions: Tuple[type, ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call `operation` until it stops raising `exceptions`, sleeping between attempts.

    The last exception is re-raised once `attempts` is exhausted.
    """
    for attempt in range(attempts):
        try:
            return operation()
        except exceptions:  # type: ignore[misc]
            if attempt == attempts - 1:
                raise
            sleep(delay)
            delay *= backoff
    raise ValueError("attempts must be at least 1")
