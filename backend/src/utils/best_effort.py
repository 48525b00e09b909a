"""
Best-effort execution of side effects.

Emails and event publishes must never change the outcome of the primary
operation that triggered them. ``run_best_effort`` runs one side effect,
logs any failure as a warning and reports whether it succeeded.
"""

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


def run_best_effort(action: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> bool:
    """
    Run a side effect without letting it raise.

    Args:
        action: Short description used in the log line (e.g. "send confirmation email")
        func: The side effect to run
        *args: Positional arguments for ``func``
        **kwargs: Keyword arguments for ``func``

    Returns:
        False if ``func`` raised or returned ``False``, True otherwise
    """
    try:
        result = func(*args, **kwargs)
    except Exception as e:
        logger.warning(f"Best-effort action failed ({action}): {e}")
        return False

    if result is False:
        logger.warning(f"Best-effort action reported failure ({action})")
        return False
    return True
