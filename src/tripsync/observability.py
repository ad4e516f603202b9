"""Observability sink for storage and migration failures.

The sink is optional: nothing in the storage core depends on it for
correctness, only for diagnostics.
"""

import logging
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class ObservabilitySink(Protocol):
    def capture(self, event: str, error: BaseException | None = None, **tags: str) -> None: ...


class LoggingSink:
    """Default sink: writes every event to the ``tripsync.observability`` logger."""

    def capture(self, event: str, error: BaseException | None = None, **tags: str) -> None:
        logger.error("[%s] %s %s", event, error if error is not None else "", tags or "")


def report(sink: ObservabilitySink | None, event: str, error: BaseException | None = None, **tags: str) -> None:
    """Send an event to ``sink``. A failing sink never masks the error being reported."""
    if sink is None:
        return
    try:
        sink.capture(event, error, **tags)
    except Exception:
        logger.exception("Observability sink failed while reporting %s", event)
