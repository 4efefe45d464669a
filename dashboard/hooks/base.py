# dashboard/hooks/base.py
from __future__ import annotations
import logging
from typing import Callable, List, Protocol, Tuple, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")

# Freshness windows (seconds)
MINUTE = 60


class Notifier(Protocol):
    def success(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...


class RecordingNotifier:
    """Keeps messages in memory; used outside Streamlit (tests, scripts)."""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))


class MutationError(Exception):
    """A write failed; the user has already been notified."""


def error_message(exc: BaseException, fallback: str) -> str:
    # postgrest.APIError carries the store's text on .message
    msg = getattr(exc, "message", None) or str(exc)
    return msg or fallback


def run_mutation(
    notify: Notifier,
    action: Callable[[], T],
    *,
    fallback: str,
    on_success: Callable[[T], str],
) -> T:
    """
    Run a write. On success `on_success` patches the cache and returns the
    notification text. On failure the cache is left alone, the error is
    announced and re-raised as MutationError.
    """
    try:
        result = action()
    except Exception as exc:
        log.error("%s", fallback, exc_info=True)
        msg = error_message(exc, fallback)
        notify.error(msg)
        raise MutationError(msg) from exc
    notify.success(on_success(result))
    return result
