"""Single recovery seam for remote-model calls.

Every component that talks to the language model goes through
``call_with_fallback`` so that "never raise past this boundary" is enforced
in one place rather than at each call site.
"""
import logging
from typing import Awaitable, Callable, TypeVar

from integrations.gemini.client import LLMNotConfiguredError, LLMTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_fallback(
    operation: Callable[[], Awaitable[T]],
    fallback: Callable[[], T],
    *,
    label: str,
) -> T:
    """Await ``operation()``; on any failure log it and return ``fallback()``.

    ``fallback`` must be synchronous and total. No retry is attempted.
    """
    try:
        return await operation()
    except LLMNotConfiguredError:
        logger.info(f"{label}: language model not configured, using fallback")
    except LLMTimeoutError as e:
        logger.warning(f"{label}: timed out ({e}), using fallback")
    except Exception as e:
        logger.warning(f"{label}: failed ({type(e).__name__}: {e}), using fallback")
    return fallback()
