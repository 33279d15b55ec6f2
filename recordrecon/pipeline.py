"""High-level orchestration of a reconciliation pass."""
from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Mapping, Protocol, TypeVar

from .checks import find_differences
from .config import ReconciliationConfig
from .matching import resolve_mapping
from .merge import merge_record
from .models import ReconciliationReport
from .normalization import apply_converters
from .report import build_report

LOGGER = logging.getLogger(__name__)

R = TypeVar("R")


class DiffLogger(Protocol):
    def log(self, message: str, data: Any) -> None: ...


class LoggingDiffLogger:
    """Forward debug messages to the standard ``logging`` tree."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("recordrecon")

    def log(self, message: str, data: Any) -> None:
        self._logger.info("[DataReconciliation] %s %s", message, data)


def _emit(logger: DiffLogger, message: str, data: Any) -> None:
    try:
        logger.log(message, data)
    except Exception as exc:
        LOGGER.warning("Diff logger failed on %r: %s", message, exc)


def reconcile(
    source_record: Mapping[str, Any] | None,
    target_record: Mapping[str, Any] | None,
    config: ReconciliationConfig,
    *,
    logger: DiffLogger | None = None,
) -> ReconciliationReport:
    """Diff, convert and merge ``source_record`` against ``target_record``."""

    source = source_record or {}
    target = target_record or {}
    diff_logger = logger or LoggingDiffLogger()

    tables = resolve_mapping(config.field_mapping)
    if config.debug:
        _emit(diff_logger, "starting reconciliation", {"source": dict(source), "target": dict(target)})

    differences = find_differences(source, target, tables, config.type_converters)
    if config.debug:
        _emit(diff_logger, "differences found", [diff.as_json() for diff in differences])

    working_copy = dict(source)
    apply_converters(working_copy, differences, config.type_converters)
    canonical = merge_record(working_copy, tables.mapping)

    return build_report(
        differences,
        source_record=source,
        target_record=target,
        canonical_record=canonical,
    )


def wrap(
    config: ReconciliationConfig,
    *,
    logger: DiffLogger | None = None,
    method: bool = False,
) -> Callable[[Callable[..., R]], Callable[..., R]]:
    """Decorate a handler so it receives the reconciled record.

    The decorated function keeps the ``(source, target, *rest)`` call
    signature; the handler itself is invoked as
    ``handler(canonical_record, target_record, report, *rest, **kwargs)``.
    With ``method=True`` the first positional argument (``self``) is passed
    through ahead of the reconciled arguments.
    """

    def decorator(handler: Callable[..., R]) -> Callable[..., R]:
        if method:

            @wraps(handler)
            def bound_wrapper(instance: Any, source: Any = None, target: Any = None, *rest: Any, **kwargs: Any) -> R:
                report = reconcile(source, target, config, logger=logger)
                return handler(instance, report.canonical_record, report.target_record, report, *rest, **kwargs)

            return bound_wrapper

        @wraps(handler)
        def wrapper(source: Any = None, target: Any = None, *rest: Any, **kwargs: Any) -> R:
            report = reconcile(source, target, config, logger=logger)
            return handler(report.canonical_record, report.target_record, report, *rest, **kwargs)

        return wrapper

    return decorator
