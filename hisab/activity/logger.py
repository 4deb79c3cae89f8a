"""
Activity Logger

Every mutation of a group is logged as a structured event, and every
rejected operation is logged as a warning with the error that caused it.

The activity logger:
- Is synchronous, like the rest of the core
- Only writes to the structured log (nothing is persisted)
- Never raises: a logging failure must not undo a successful mutation
"""

import logging
from typing import Any, Optional
from uuid import UUID

import structlog

from hisab.models.activity import ActivityEvent, ActivityEventBuilder, ActivitySeverity


# Configure structlog for local logging
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


def configure_log_level(level: str) -> None:
    """Route activity logs through stdlib logging at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class ActivityLogger:
    """Central activity logging service."""

    def __init__(self, logger: Optional[Any] = None):
        """
        Initialize activity logger.

        Args:
            logger: A structlog-style logger (info/warning/error methods).
                    Defaults to the configured structlog logger.
        """
        self._logger = logger or structlog.get_logger("hisab.activity")

    def log(self, event: ActivityEvent) -> bool:
        """
        Log an activity event.

        Returns False if the log write itself failed.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity == ActivitySeverity.ERROR:
                self._logger.error("activity_event", **log_dict)
            elif event.severity == ActivitySeverity.WARNING:
                self._logger.warning("activity_event", **log_dict)
            else:
                self._logger.info("activity_event", **log_dict)
        except (OSError, ValueError, TypeError):
            return False

        return True

    def log_group_created(self, group_id: UUID, name: str, currency: str) -> None:
        self.log(ActivityEventBuilder.group_created(group_id, name, currency))

    def log_group_renamed(self, group_id: UUID, old_name: str, new_name: str) -> None:
        self.log(ActivityEventBuilder.group_renamed(group_id, old_name, new_name))

    def log_group_deleted(self, group_id: UUID, name: str) -> None:
        self.log(ActivityEventBuilder.group_deleted(group_id, name))

    def log_participant_added(self, group_id: UUID, name: str) -> None:
        self.log(ActivityEventBuilder.participant_added(group_id, name))

    def log_participant_removed(self, group_id: UUID, name: str) -> None:
        self.log(ActivityEventBuilder.participant_removed(group_id, name))

    def log_expense_added(
        self,
        group_id: UUID,
        expense_id: UUID,
        description: str,
        amount: str,
        payer: str,
        split_method: str,
    ) -> None:
        """Log a new expense."""
        event = ActivityEventBuilder.expense_added(
            group_id=group_id,
            expense_id=expense_id,
            description=description,
            amount=amount,
            payer=payer,
            split_method=split_method,
        )
        self.log(event)

    def log_expense_updated(
        self,
        group_id: UUID,
        expense_id: UUID,
        changed_fields: list[str],
    ) -> None:
        self.log(ActivityEventBuilder.expense_updated(group_id, expense_id, changed_fields))

    def log_expense_deleted(self, group_id: UUID, expense_id: UUID) -> None:
        self.log(ActivityEventBuilder.expense_deleted(group_id, expense_id))

    def log_settlement_recorded(
        self,
        group_id: UUID,
        settlement_id: UUID,
        from_participant: str,
        to_participant: str,
        amount: str,
    ) -> None:
        """Log a recorded settlement."""
        event = ActivityEventBuilder.settlement_recorded(
            group_id=group_id,
            settlement_id=settlement_id,
            from_participant=from_participant,
            to_participant=to_participant,
            amount=amount,
        )
        self.log(event)

    def log_export_generated(self, group_id: UUID, export_format: str) -> None:
        self.log(ActivityEventBuilder.export_generated(group_id, export_format))

    def log_rejected(
        self,
        operation: str,
        error: Exception,
        group_id: Optional[UUID] = None,
    ) -> None:
        """Log an operation that was refused with a recoverable error."""
        self.log(ActivityEventBuilder.operation_rejected(operation, error, group_id))

    def log_storage_error(
        self,
        operation: str,
        error: Exception,
        group_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.storage_error(operation, error, group_id))
