# app/utils/retry.py
import time
from typing import Callable, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from app.domain.errors import OptimisticConflictError
from app.utils.settings import (
    CART_RETRY_INITIAL_DELAY_MS,
    CART_RETRY_JITTER_MS,
    CART_RETRY_MAX_ATTEMPTS,
    CART_RETRY_MULTIPLIER,
)
from app.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def _log_conflict(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"Optimistic conflict on attempt {retry_state.attempt_number}, "
        f"retrying in {retry_state.next_action.sleep:.3f}s: {exc}"
    )


def conflict_retry(
    attempts: int = CART_RETRY_MAX_ATTEMPTS,
    initial_delay: float = CART_RETRY_INITIAL_DELAY_MS / 1000,
    multiplier: float = CART_RETRY_MULTIPLIER,
    jitter: float = CART_RETRY_JITTER_MS / 1000,
    sleep: Callable[[float], None] = time.sleep,
) -> Retrying:
    """
    Retry tylko dla OptimisticConflictError.
    Czekanie: initial_delay * multiplier^(n-1) + losowy jitter z [0, jitter].
    Po ostatniej próbie leci ostatni konflikt (reraise).
    """
    return Retrying(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=initial_delay, exp_base=multiplier) + wait_random(0, jitter),
        retry=retry_if_exception_type(OptimisticConflictError),
        before_sleep=_log_conflict,
        sleep=sleep,
    )


def run_with_conflict_retry(unit_of_work: Callable[[], T], **policy) -> T:
    """Wykonuje całą jednostkę pracy (odczyt + zmiana + zapis) od nowa przy każdym konflikcie."""
    return conflict_retry(**policy)(unit_of_work)
