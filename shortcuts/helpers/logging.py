"""Colored timing for analysis and publishing steps, mirrored to ``logging``."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Generator, TypeVar

from .formatting import Fore, Style
from .notifications import send_failure_email

T = TypeVar("T")

logger = logging.getLogger("shortcuts.steps")


def _started(name: str) -> None:
    print(f"{Fore.CYAN}{name}{Style.RESET_ALL}")
    logger.debug("%s: started", name)


def _finished(name: str, elapsed: float) -> None:
    print(f"{Fore.GREEN}  ↳ completed in {Fore.MAGENTA}{elapsed:.2f}s{Style.RESET_ALL}")
    logger.info("%s: completed in %.2fs", name, elapsed)


def _failed(name: str, elapsed: float, exc: BaseException, notify: bool) -> None:
    print(
        f"{Fore.RED}  ↳ failed after {Fore.MAGENTA}{elapsed:.2f}s{Fore.RED}: {exc}{Style.RESET_ALL}"
    )
    logger.warning("%s: failed after %.2fs: %s", name, elapsed, exc)
    if notify:
        send_failure_email(
            f"Step failed: {name}",
            f"Step '{name}' failed after {elapsed:.2f}s with error: {exc}",
        )


@contextmanager
def log_timing(name: str, *, notify: bool = False) -> Generator[None, None, None]:
    """Time the enclosed block; with ``notify`` a failure is also e-mailed."""

    _started(name)
    start = time.perf_counter()
    try:
        yield
    except Exception as exc:
        _failed(name, time.perf_counter() - start, exc, notify)
        raise
    _finished(name, time.perf_counter() - start)


def run_step(name: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Call ``func(*args, **kwargs)`` as a named, timed step.

    Failures are reported by e-mail (when SMTP is configured) and re-raised.
    """

    with log_timing(name, notify=True):
        return func(*args, **kwargs)


__all__ = ["log_timing", "run_step"]
