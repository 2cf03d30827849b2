"""CLI resilience wrappers for cancellation and unexpected failures."""

import sys
import traceback
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

import click

from unity_yaml_editor.cli.logging import get_cli_logger
from unity_yaml_editor.cli.output import emit_error

__all__ = [
    "handle_keyboard_interrupt",
    "handle_unexpected_errors",
]

T = TypeVar("T")

logger = get_cli_logger()


def handle_keyboard_interrupt(
    cleanup: Optional[Callable[[], None]] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator to gracefully handle Ctrl+C in CLI commands.

    Catches KeyboardInterrupt, optionally runs cleanup, and exits
    with code 130 (128 + SIGINT).

    Example:
        >>> @handle_keyboard_interrupt(cleanup=lambda: print("Cancelled"))
        ... def long_running_task():
        ...     ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                if cleanup:
                    cleanup()
                sys.exit(130)

        return wrapper

    return decorator


def handle_unexpected_errors() -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator turning any uncaught exception into an INTERNAL_ERROR envelope.

    Click's own exceptions pass through so usage errors keep their exit code.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except click.ClickException:
                raise
            except Exception as e:
                logger.error(
                    f"Unexpected error in {func.__name__}: {e}",
                    error_type=type(e).__name__,
                    traceback=traceback.format_exc(),
                )
                emit_error(
                    f"Unexpected error: {e}",
                    code="INTERNAL_ERROR",
                    error_type="internal",
                    remediation="Re-run with --verbose and report the log output.",
                    details={"exception": type(e).__name__},
                )

        return wrapper

    return decorator
