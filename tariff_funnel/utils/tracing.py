"""Step tracing for multi-write funnel operations."""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generator
from uuid import UUID, uuid4

from tariff_funnel.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class TraceEvent:
    """Individual step of a traced funnel operation."""

    timestamp: datetime
    step: str
    trace_id: UUID
    duration_ms: float | None = None
    success: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)


class FunnelTracer:
    """Records the steps of one funnel operation, e.g. a contract import."""

    def __init__(self, operation: str, trace_id: UUID | None = None):
        self.operation = operation
        self.trace_id = trace_id or uuid4()
        self.events: list[TraceEvent] = []
        self.start_time = time.time()

    def add_event(
        self,
        step: str,
        duration_ms: float | None = None,
        success: bool = True,
        **metadata: Any,
    ) -> None:
        """Add a trace event."""
        event = TraceEvent(
            timestamp=datetime.now(timezone.utc),
            step=step,
            trace_id=self.trace_id,
            duration_ms=duration_ms,
            success=success,
            metadata=metadata,
        )
        self.events.append(event)

        logger.info(
            "trace_event",
            trace_id=str(self.trace_id),
            operation=self.operation,
            step=step,
            duration_ms=duration_ms,
            success=success,
            **metadata,
        )

    @contextmanager
    def trace_step(self, step: str, **metadata: Any) -> Generator[None, None, None]:
        """Context manager to trace a step with timing; failures are recorded and re-raised."""
        start = time.time()
        success = True
        try:
            yield
        except Exception:
            success = False
            raise
        finally:
            duration_ms = (time.time() - start) * 1000
            self.add_event(step, duration_ms=duration_ms, success=success, **metadata)

    @property
    def completed_steps(self) -> list[str]:
        return [event.step for event in self.events if event.success]

    def get_trace_summary(self) -> dict[str, Any]:
        """Get a summary of the trace."""
        total_duration = (time.time() - self.start_time) * 1000

        return {
            "trace_id": str(self.trace_id),
            "operation": self.operation,
            "total_duration_ms": total_duration,
            "total_events": len(self.events),
            "failed_steps": [event.step for event in self.events if not event.success],
            "events": [
                {
                    "timestamp": event.timestamp.isoformat(),
                    "step": event.step,
                    "duration_ms": event.duration_ms,
                    "success": event.success,
                    "metadata": event.metadata,
                }
                for event in self.events
            ],
        }
