"""Structured diagnostics sink for solver tracing."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Sequence

from algloop.core.status import LogCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiagnosticRecord:
    """One timestamped diagnostics entry."""

    timestamp: float
    level: int                 # logging level, e.g. logging.DEBUG
    category: Optional[LogCategory]
    message: str
    data: dict[str, Any] = field(default_factory=dict)


class Diagnostics:
    """
    Collects diagnostics records for one solver instance.

    Records are kept in memory and forwarded to a standard logger, so a
    caller can either inspect them after a solve or configure logging.
    """

    def __init__(
        self,
        log: Optional[logging.Logger] = None,
        min_level: int = logging.DEBUG,
    ):
        self.log = log if log is not None else logger
        self.min_level = min_level
        self.records: list[DiagnosticRecord] = []

    def record(
        self,
        level: int,
        message: str,
        category: Optional[LogCategory] = None,
        **data: Any,
    ) -> None:
        """Append a record and forward it to the logger."""
        if level < self.min_level:
            return
        self.records.append(
            DiagnosticRecord(
                timestamp=time.time(),
                level=level,
                category=category,
                message=message,
                data=data,
            )
        )
        if self.log.isEnabledFor(level):
            prefix = f"[{category.value}] " if category is not None else ""
            self.log.log(level, "%s%s", prefix, message)

    def debug(
        self, message: str, category: Optional[LogCategory] = None, **data: Any
    ) -> None:
        self.record(logging.DEBUG, message, category, **data)

    def warning(
        self, message: str, category: Optional[LogCategory] = None, **data: Any
    ) -> None:
        self.record(logging.WARNING, message, category, **data)

    def vector(
        self,
        name: str,
        values: Sequence[Any],
        category: Optional[LogCategory] = None,
    ) -> None:
        """Record a vector as ``name = {v0, v1, ...}``."""
        if logging.DEBUG < self.min_level:
            return
        items = list(values)
        text = ", ".join(str(v) for v in items)
        self.debug(f"{name} = {{{text}}}", category, name=name, values=items)

    def messages(self, level: Optional[int] = None) -> Iterator[str]:
        """Iterate over recorded messages, optionally of a single level."""
        for rec in self.records:
            if level is None or rec.level == level:
                yield rec.message

    def clear(self) -> None:
        self.records.clear()
