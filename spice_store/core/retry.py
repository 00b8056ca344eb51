import logging
import time
from typing import Callable, Optional

import httpx
from postgrest.exceptions import APIError

from spice_store.core.errors import TransientBackendError

logger = logging.getLogger("RETRY")
logger.setLevel(logging.INFO)

DEFAULT_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.2


def is_transient(exc: BaseException) -> bool:
    """Network trouble and 5xx answers are worth another try, anything else is not."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    if isinstance(exc, APIError):
        text = f"{exc.code or ''} {exc.message or ''}".lower()
        return "500" in text or "timeout" in text or "503" in text
    status = getattr(exc, "status", None)
    if isinstance(status, int):
        return status >= 500
    return False


def retry_call(
    fn: Callable,
    *args,
    attempts: int = DEFAULT_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    transient: Callable[[BaseException], bool] = is_transient,
    sleep: Callable[[float], None] = time.sleep,
    label: Optional[str] = None,
    **kwargs,
):
    """Call ``fn`` up to ``attempts`` times, waiting ``base_delay * attempt`` between tries.

    Non-transient errors are raised straight away. When every attempt fails with a
    transient error a ``TransientBackendError`` is raised from the last one.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")
    name = label or getattr(fn, "__name__", "call")
    for attempt in range(1, attempts + 1):
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            if not transient(e):
                raise
            if attempt == attempts:
                logger.error(f"{name} failed after {attempts} attempts: {e}")
                raise TransientBackendError(f"{name} failed: {e}") from e
            logger.warning(f"{name} attempt {attempt} failed ({e}), retrying")
            sleep(base_delay * attempt)

