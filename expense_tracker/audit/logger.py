"""
Audit Logger

DESIGN DECISION: Every change to the tracker's data is logged.
This provides:
1. Traceability of what happened to the ledger and when
2. Debugging capability
3. A "recent activity" view for the user

The audit logger:
- Subscribes to the state manager and logs every StateChange
- Logs AI request failures with the operation that failed
- Keeps a bounded in-memory list of recent changes
- Never raises into the caller
"""

import logging
import sys
from collections import deque
from typing import Optional

import structlog

from expense_tracker.models import StateChange


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog for local logging.

    JSON lines on stderr, routed through stdlib logging so the level
    filter applies.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Use an instance as a state manager listener:

        manager.subscribe(audit_logger)
    """

    def __init__(self, history_size: int = 50):
        """
        Initialize audit logger.

        Args:
            history_size: How many recent changes to keep for display.
        """
        self._recent: deque[StateChange] = deque(maxlen=history_size)
        self._logger = structlog.get_logger()

    def __call__(self, change: StateChange) -> None:
        self.log_change(change)

    def log_change(self, change: StateChange) -> None:
        """Log a state change and remember it."""
        self._recent.append(change)
        self._logger.info("state_change", **change.to_log_dict())

    def recent(self, limit: Optional[int] = None) -> list[StateChange]:
        """Recent changes, newest first."""
        changes = list(reversed(self._recent))
        return changes if limit is None else changes[:limit]

    def log_ai_request(self, operation: str, **details) -> None:
        """Log an AI request being sent."""
        self._logger.info("ai_request", operation=operation, **details)

    def log_ai_request_failed(
        self,
        operation: str,
        error: BaseException,
    ) -> None:
        """Log a failed AI request."""
        self._logger.error(
            "ai_request_failed",
            operation=operation,
            error_type=type(error).__name__,
            error=str(error),
        )

    def log_input_rejected(self, operation: str, reason: str) -> None:
        """Log an AI request that was not sent because the input was unusable."""
        self._logger.info("ai_request_skipped", operation=operation, reason=reason)
