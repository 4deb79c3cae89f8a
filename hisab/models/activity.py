"""
Activity Event Models for hisab

Every mutation of a group produces one structured activity event, and
every rejected operation produces a warning event. These are written to
the structured log only.

DESIGN DECISION: Activity events are not persisted. The stored groups and
settlements are the only record; the log is for debugging and operations.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events we log."""
    # Groups
    GROUP_CREATED = "group_created"
    GROUP_RENAMED = "group_renamed"
    GROUP_DELETED = "group_deleted"

    # Participants
    PARTICIPANT_ADDED = "participant_added"
    PARTICIPANT_REMOVED = "participant_removed"

    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Settlements
    SETTLEMENT_RECORDED = "settlement_recorded"

    # Read-only projections
    EXPORT_GENERATED = "export_generated"

    # Failures
    OPERATION_REJECTED = "operation_rejected"
    STORAGE_ERROR = "storage_error"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single activity event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )
    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    # What is this about?
    group_id: Optional[UUID] = None
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'group', 'expense', 'settlement')"
    )
    entity_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "group_id": str(self.group_id) if self.group_id else None,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.expense_added(group_id, expense_id, ...)
        event = ActivityEventBuilder.operation_rejected("add_expense", error)
    """

    @staticmethod
    def group_created(group_id: UUID, name: str, currency: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.GROUP_CREATED,
            group_id=group_id,
            entity_type="group",
            entity_id=group_id,
            description=f"Group created: {name}",
            details={"name": name, "currency": currency},
        )

    @staticmethod
    def group_renamed(group_id: UUID, old_name: str, new_name: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.GROUP_RENAMED,
            group_id=group_id,
            entity_type="group",
            entity_id=group_id,
            description=f"Group renamed: {old_name} -> {new_name}",
            details={"old_name": old_name, "new_name": new_name},
        )

    @staticmethod
    def group_deleted(group_id: UUID, name: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.GROUP_DELETED,
            group_id=group_id,
            entity_type="group",
            entity_id=group_id,
            description=f"Group deleted: {name}",
        )

    @staticmethod
    def participant_added(group_id: UUID, name: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.PARTICIPANT_ADDED,
            group_id=group_id,
            entity_type="participant",
            description=f"Participant added: {name}",
            details={"name": name},
        )

    @staticmethod
    def participant_removed(group_id: UUID, name: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.PARTICIPANT_REMOVED,
            group_id=group_id,
            entity_type="participant",
            description=f"Participant removed: {name}",
            details={"name": name},
        )

    @staticmethod
    def expense_added(
        group_id: UUID,
        expense_id: UUID,
        description: str,
        amount: str,
        payer: str,
        split_method: str,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.EXPENSE_ADDED,
            group_id=group_id,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense added: {description} - {amount}",
            details={
                "amount": amount,
                "payer": payer,
                "split_method": split_method,
            },
        )

    @staticmethod
    def expense_updated(
        group_id: UUID,
        expense_id: UUID,
        changed_fields: list[str],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.EXPENSE_UPDATED,
            group_id=group_id,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense updated: {', '.join(changed_fields) or 'no changes'}",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def expense_deleted(group_id: UUID, expense_id: UUID) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.EXPENSE_DELETED,
            group_id=group_id,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense deleted",
        )

    @staticmethod
    def settlement_recorded(
        group_id: UUID,
        settlement_id: UUID,
        from_participant: str,
        to_participant: str,
        amount: str,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SETTLEMENT_RECORDED,
            group_id=group_id,
            entity_type="settlement",
            entity_id=settlement_id,
            description=f"Settlement: {from_participant} paid {to_participant} {amount}",
            details={
                "from": from_participant,
                "to": to_participant,
                "amount": amount,
            },
        )

    @staticmethod
    def export_generated(group_id: UUID, export_format: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.EXPORT_GENERATED,
            group_id=group_id,
            entity_type="group",
            entity_id=group_id,
            description=f"Summary exported as {export_format}",
            details={"format": export_format},
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        error: Exception,
        group_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.OPERATION_REJECTED,
            severity=ActivitySeverity.WARNING,
            group_id=group_id,
            description=f"Operation rejected: {operation}",
            error_code=type(error).__name__,
            error_message=str(error),
            details={"operation": operation},
        )

    @staticmethod
    def storage_error(
        operation: str,
        error: Exception,
        group_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STORAGE_ERROR,
            severity=ActivitySeverity.ERROR,
            group_id=group_id,
            description=f"Storage failure during {operation}",
            error_code=type(error).__name__,
            error_message=str(error),
            details={"operation": operation},
        )
