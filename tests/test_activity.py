"""Tests for activity events and the activity logger."""

from uuid import uuid4

from hisab.activity import ActivityLogger
from hisab.ledger.errors import UnknownParticipantError
from hisab.models import ActivityEvent, ActivityEventBuilder, ActivityEventType, ActivitySeverity


class TestActivityEvents:
    """Tests for the event models and builder."""

    def test_to_log_dict(self):
        """Test the structured log representation."""
        group_id = uuid4()
        event = ActivityEventBuilder.group_created(group_id, "Trip", "USD")
        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "group_created"
        assert log_dict["severity"] == "info"
        assert log_dict["group_id"] == str(group_id)
        assert log_dict["entity_type"] == "group"
        assert log_dict["details"]["currency"] == "USD"

    def test_expense_added(self):
        """Test the expense event carries its amount and split method."""
        event = ActivityEventBuilder.expense_added(
            group_id=uuid4(),
            expense_id=uuid4(),
            description="Dinner",
            amount="10.00",
            payer="Alice",
            split_method="equal",
        )
        assert event.event_type == ActivityEventType.EXPENSE_ADDED
        assert event.entity_type == "expense"
        assert event.details["amount"] == "10.00"
        assert event.details["split_method"] == "equal"

    def test_operation_rejected(self):
        """Test that rejections are warnings with the error attached."""
        event = ActivityEventBuilder.operation_rejected(
            "add_expense", UnknownParticipantError("Mallory"),
        )
        assert event.severity == ActivitySeverity.WARNING
        assert event.error_code == "UnknownParticipantError"
        assert event.error_message == "Unknown participant: Mallory"
        assert event.details == {"operation": "add_expense"}

    def test_storage_error_is_error_level(self):
        """Test that storage failures are errors."""
        event = ActivityEventBuilder.storage_error("save_group", OSError("disk full"))
        assert event.severity == ActivitySeverity.ERROR
        assert event.event_type == ActivityEventType.STORAGE_ERROR


class TestActivityLogger:
    """Tests for dispatching events to the logger."""

    def test_levels_follow_severity(self, activity_logger, recorder):
        """Test that each severity goes to the matching log method."""
        group_id = uuid4()
        activity_logger.log_participant_added(group_id, "Alice")
        activity_logger.log_rejected("remove_participant", UnknownParticipantError("Bob"), group_id)
        activity_logger.log_storage_error("save_group", OSError("disk full"), group_id)

        assert [r["level"] for r in recorder.records] == ["info", "warning", "error"]
        assert all(r["event"] == "activity_event" for r in recorder.records)
        assert recorder.records[0]["details"] == {"name": "Alice"}

    def test_log_failure_is_reported_not_raised(self):
        """Test that a broken log sink doesn't break the caller."""

        class BrokenLogger:
            def info(self, event, **kwargs):
                raise OSError("stream closed")

        logger = ActivityLogger(logger=BrokenLogger())
        event = ActivityEventBuilder.group_deleted(uuid4(), "Trip")
        assert logger.log(event) is False

    def test_default_logger_is_structlog(self):
        """Test that the default logger works without configuration."""
        event = ActivityEvent(
            event_type=ActivityEventType.EXPORT_GENERATED,
            description="Summary exported as text",
        )
        assert ActivityLogger().log(event) is True
