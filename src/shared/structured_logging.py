"""Structured logging and metrics for UI state synchronization.

This module provides a standardized logging interface that emits JSON-formatted
log events for the synchronization steps around each test, so a failed run can
be reconstructed from the log alone.

Key features:
- JSON-structured log events for machine parsing
- Trace ID correlation across the steps of one test
- Phase-based event categorization (authentication, cleanup, verification)
- Built-in metrics aggregation (convergence rate, wait times, login counts)

Usage:
    from src.shared.structured_logging import StructuredLogger, MetricsAggregator

    logger = StructuredLogger(suite='favorites')
    logger.log_auth(state='authenticated', method='session_restore')
    logger.log_cleanup(found=3, issued=3, remaining=0, converged=True)

    metrics = MetricsAggregator()
    metrics.add_poll(converged=True, elapsed_ms=820.0, attempts=3)
    summary = metrics.get_summary()
"""

import json
import logging
import time
import uuid
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from enum import Enum

__all__ = [
    'LogEvent',
    'EventType',
    'Phase',
    'StructuredLogger',
    'MetricsAggregator',
    'create_logger',
]


class EventType(str, Enum):
    """Standard event types for structured logging."""
    AUTH = 'auth'
    SESSION_SAVED = 'session_saved'
    CLEANUP = 'cleanup'
    CONVERGENCE = 'convergence'
    ERROR = 'error'
    PHASE_START = 'phase_start'
    PHASE_END = 'phase_end'


class Phase(str, Enum):
    """Per-test synchronization phases."""
    SETUP = 'setup'
    AUTHENTICATION = 'authentication'
    CLEANUP = 'cleanup'
    ACTION = 'action'
    VERIFICATION = 'verification'
    TEARDOWN = 'teardown'


@dataclass
class LogEvent:
    """Standard log event structure for observability.

    All timestamps are in ISO 8601 format (UTC).

    Attributes:
        timestamp: ISO 8601 timestamp (UTC)
        trace_id: Unique ID for this test run (8-char UUID)
        suite: Suite or scenario name
        phase: Current phase
        event: Event type
        state: Auth state or outcome label (optional)
        attempts: Number of check attempts (optional)
        count: Item count relevant to the event (optional)
        elapsed_ms: Duration in milliseconds (optional)
        error: Error message (optional)
        metadata: Additional context data (optional)
    """
    timestamp: str
    trace_id: str
    suite: str
    phase: str
    event: str
    state: Optional[str] = None
    attempts: Optional[int] = None
    count: Optional[int] = None
    elapsed_ms: Optional[float] = None
    error: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def to_json(self) -> str:
        """Serialize event to JSON string, dropping unset fields."""
        data = {k: v for k, v in asdict(self).items() if v is not None}
        return json.dumps(data, ensure_ascii=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary."""
        return {k: v for k, v in asdict(self).items() if v is not None}


class StructuredLogger:
    """Emit structured log events for one suite.

    Attributes:
        suite: Suite name for this logger instance
        trace_id: Unique run identifier (8-char UUID)
        logger: Underlying Python logger instance
    """

    def __init__(
        self,
        suite: str,
        trace_id: Optional[str] = None,
        logger_name: Optional[str] = None
    ):
        self.suite = suite
        self.trace_id = trace_id or str(uuid.uuid4())[:8]
        self.logger = logging.getLogger(logger_name or 'structured')
        self._phase_start_times: Dict[str, float] = {}

    def _create_event(self, phase: str, event: str, **kwargs) -> LogEvent:
        return LogEvent(
            timestamp=datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            trace_id=self.trace_id,
            suite=self.suite,
            phase=phase,
            event=event,
            **kwargs
        )

    def log_auth(
        self,
        state: str,
        method: Optional[str] = None,
        error: Optional[str] = None,
    ) -> None:
        """Log the outcome of an authentication check.

        Args:
            state: Final AuthState value
            method: How the state was reached ('already', 'session_restore', 'login')
            error: Failure message for the failed state
        """
        event = self._create_event(
            phase=Phase.AUTHENTICATION.value,
            event=EventType.AUTH.value,
            state=state,
            error=error,
            metadata={'method': method} if method else None,
        )
        if error:
            self.logger.error(event.to_json())
        else:
            self.logger.info(event.to_json())

    def log_session_saved(self, cookie_count: int, path: str) -> None:
        """Log a persisted session snapshot."""
        event = self._create_event(
            phase=Phase.AUTHENTICATION.value,
            event=EventType.SESSION_SAVED.value,
            count=cookie_count,
            metadata={'path': path},
        )
        self.logger.info(event.to_json())

    def log_cleanup(
        self,
        found: int,
        issued: int,
        remaining: int,
        converged: bool,
        elapsed_ms: Optional[float] = None,
    ) -> None:
        """Log the result of a shared-state reset.

        Incomplete cleanup is logged at WARNING, never ERROR.
        """
        event = self._create_event(
            phase=Phase.CLEANUP.value,
            event=EventType.CLEANUP.value,
            state='converged' if converged else 'incomplete',
            count=remaining,
            elapsed_ms=round(elapsed_ms, 2) if elapsed_ms is not None else None,
            metadata={'found': found, 'issued': issued},
        )
        if converged:
            self.logger.info(event.to_json())
        else:
            self.logger.warning(event.to_json())

    def log_convergence(
        self,
        description: str,
        converged: bool,
        attempts: Optional[int] = None,
        elapsed_ms: Optional[float] = None,
        reason: Optional[str] = None,
        phase: str = Phase.VERIFICATION.value,
    ) -> None:
        """Log the result of a verification poll."""
        event = self._create_event(
            phase=phase,
            event=EventType.CONVERGENCE.value,
            state='converged' if converged else 'timeout',
            attempts=attempts,
            elapsed_ms=round(elapsed_ms, 2) if elapsed_ms is not None else None,
            error=None if converged else reason,
            metadata={'description': description},
        )
        if converged:
            self.logger.debug(event.to_json())
        else:
            self.logger.warning(event.to_json())

    def log_error(
        self,
        error_message: str,
        phase: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log error event."""
        event = self._create_event(
            phase=phase,
            event=EventType.ERROR.value,
            error=error_message,
            metadata=metadata
        )
        self.logger.error(event.to_json())

    def log_phase_start(self, phase: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Log start of a phase."""
        self._phase_start_times[phase] = time.time()
        event = self._create_event(
            phase=phase,
            event=EventType.PHASE_START.value,
            metadata=metadata
        )
        self.logger.info(event.to_json())

    def log_phase_end(
        self,
        phase: str,
        count: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log completion of a phase, with its duration if the start was logged."""
        elapsed_ms = None
        if phase in self._phase_start_times:
            elapsed_ms = round((time.time() - self._phase_start_times.pop(phase)) * 1000, 2)

        event = self._create_event(
            phase=phase,
            event=EventType.PHASE_END.value,
            count=count,
            elapsed_ms=elapsed_ms,
            metadata=metadata
        )
        self.logger.info(event.to_json())


@dataclass
class MetricsAggregator:
    """Aggregate synchronization metrics across a test session.

    Attributes:
        polls: Number of verification polls
        converged: Number of polls that converged
        timeouts: Number of polls that timed out
        wait_times: Poll durations in milliseconds
        attempt_counts: Attempts per poll
        logins: Full form logins performed
        session_restores: Logins skipped by applying a cached snapshot
        incomplete_cleanups: Cleanups that left entries behind
    """

    polls: int = 0
    converged: int = 0
    timeouts: int = 0
    wait_times: List[float] = field(default_factory=list)
    attempt_counts: List[int] = field(default_factory=list)
    logins: int = 0
    session_restores: int = 0
    incomplete_cleanups: int = 0

    def add_poll(self, converged: bool, elapsed_ms: float, attempts: int = 1) -> None:
        """Record one verification poll."""
        self.polls += 1
        self.wait_times.append(elapsed_ms)
        self.attempt_counts.append(attempts)
        if converged:
            self.converged += 1
        else:
            self.timeouts += 1

    def get_summary(self) -> Dict[str, Any]:
        """Get metrics summary.

        Returns:
            Dictionary with poll counts, convergence rate, average and p95
            wait time, average attempts and auth/cleanup counters
        """
        counters = {
            'logins': self.logins,
            'session_restores': self.session_restores,
            'incomplete_cleanups': self.incomplete_cleanups,
        }
        if not self.wait_times:
            return {
                'polls': 0,
                'convergence_rate_pct': 0.0,
                'avg_wait_ms': 0.0,
                'p95_wait_ms': 0.0,
                'timeouts': 0,
                'avg_attempts': 0.0,
                **counters,
            }

        sorted_waits = sorted(self.wait_times)
        p95_index = min(int(len(sorted_waits) * 0.95), len(sorted_waits) - 1)

        return {
            'polls': self.polls,
            'convergence_rate_pct': round(self.converged / self.polls * 100, 2),
            'avg_wait_ms': round(sum(self.wait_times) / len(self.wait_times), 2),
            'p95_wait_ms': round(sorted_waits[p95_index], 2),
            'timeouts': self.timeouts,
            'avg_attempts': round(sum(self.attempt_counts) / len(self.attempt_counts), 2),
            **counters,
        }

    def reset(self) -> None:
        """Reset all metrics to zero."""
        self.polls = 0
        self.converged = 0
        self.timeouts = 0
        self.wait_times.clear()
        self.attempt_counts.clear()
        self.logins = 0
        self.session_restores = 0
        self.incomplete_cleanups = 0


def create_logger(suite: str, trace_id: Optional[str] = None) -> StructuredLogger:
    """Factory function to create a structured logger."""
    return StructuredLogger(suite=suite, trace_id=trace_id)
