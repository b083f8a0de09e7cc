"""Opt-in loguru output for forestkit.

forestkit logs through loguru but disables its own records at import. Calling
``enable_logging()`` attaches a sink that only sees forestkit records and
re-enables them until the returned handle is disabled.

Most records come from pool worker threads (tree fitting, failed prediction
tasks), so both formats include the emitting thread's name.

Levels used by the package:

- ``DEBUG``: per-tree summaries and worker pool start/stop.
- ``FOREST`` (25): one record per ``fit`` / ``predict`` call.
- ``WARNING``: failed-tree counts and samples that received no votes.
- ``ERROR``: failed prediction tasks and exceptions escaping enqueued tasks.

Note:
    Importing this module removes loguru's default stderr handler (ID 0) so
    that ``enable_logging()`` does not produce duplicate output.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from typing import TYPE_CHECKING, ClassVar, Final, Literal, TextIO

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

with contextlib.suppress(ValueError):
    logger.remove(0)

FOREST_LEVEL: Final[str] = "FOREST"
FOREST_LEVEL_NUMBER: Final[int] = 25

_FORMATS: Final[dict[str, str]] = {
    "short": (
        "<green>{time:HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "  # noqa: RUF027 - loguru format string
        "<magenta>{thread.name}</magenta> | "
        "<level>{message}</level> {extra}"
    ),
    "full": (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "  # noqa: RUF027 - loguru format string
        "<magenta>{thread.name}</magenta> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level> {extra}"
    ),
}


def _register_forest_level() -> None:
    """Add the FOREST level, or warn if another library claimed the name with a different number."""
    try:
        existing_level = logger.level(FOREST_LEVEL)
    except ValueError:
        logger.level(FOREST_LEVEL, no=FOREST_LEVEL_NUMBER, icon="🌲")
        return
    if existing_level.no != FOREST_LEVEL_NUMBER:
        warnings.warn(
            f"FOREST level already registered with numeric value {existing_level.no}, expected {FOREST_LEVEL_NUMBER}",
            stacklevel=2,
        )


_register_forest_level()

type LogLevel = Literal["TRACE", "DEBUG", "INFO", "FOREST", "WARNING", "ERROR", "CRITICAL"]

type LogFormat = Literal["short", "full"]


class LoggingHandle:
    """An attached forestkit sink.

    forestkit records stay enabled while at least one handle is attached.

    Examples:
        >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
        ...     RandomForestClassifier(tree_count=10).fit(features, labels)
    """

    _attached: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._attached.add(handler_id)

    def disable(self) -> None:
        """Detach this sink; silence forestkit again once no sink remains."""
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._attached.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._attached:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.disable()


def enable_logging(
    *,
    level: LogLevel = FOREST_LEVEL,
    log_format: LogFormat = "short",
    sink: TextIO | None = None,
) -> LoggingHandle:
    """Start writing forestkit records to a text stream.

    Args:
        level (LogLevel): Minimum level to write. Defaults to "FOREST", which
            shows fit/predict calls, failures and zero-vote samples.
        log_format (LogFormat): "short" writes time, level, thread and message;
            "full" adds the date and module:function:line.
        sink (TextIO | None): Stream to write to. Defaults to `sys.stderr`.

    Returns:
        LoggingHandle: Handle that detaches this sink when disabled.
    """
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(
        sys.stderr if sink is None else sink,
        level=level,
        filter=_is_forestkit_record,
        format=_FORMATS[log_format],
    )
    return LoggingHandle(handler_id)


def _is_forestkit_record(record: Record) -> bool:
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
