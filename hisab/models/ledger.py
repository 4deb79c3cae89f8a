"""
Core Data Models for hisab

These models define the strict schemas for groups, participants,
expenses and settlements. They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage

DESIGN DECISION: Amounts are Decimal with two decimal places at rest.
Model-level invariants (split reconciles to total, no self-settlement)
are checked here so a malformed record can never be constructed.
Membership checks need the whole group and live in the GroupStore.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import UUID, uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from hisab.ledger.money import to_cents


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """Supported expense categories."""
    FOOD = "food"
    TRANSPORTATION = "transportation"
    ACCOMMODATION = "accommodation"
    ENTERTAINMENT = "entertainment"
    UTILITIES = "utilities"
    OTHER = "other"


class SplitMethod(str, Enum):
    """
    How an expense is divided among participants.

    EQUAL and PERCENTAGE are reconciled by construction.
    CUSTOM is rejected unless the entered amounts add up.
    """
    EQUAL = "equal"
    CUSTOM = "custom"
    PERCENTAGE = "percentage"


class Currency(str, Enum):
    """Currencies a group can be kept in. No conversion between them."""
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"
    INR = "INR"


Money = Annotated[Decimal, Field(gt=0, decimal_places=2)]


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# Timestamps are stored as naive UTC so old and new records compare
UtcDatetime = Annotated[datetime, AfterValidator(_naive_utc)]


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class Participant(BaseModel):
    """
    A member of a group.

    Identity is the name: it must be unique within its group.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Participant name (unique within group)"
    )
    join_date: date = Field(
        default_factory=date.today,
        description="When the participant joined the group"
    )


class Expense(BaseModel):
    """
    A single shared expense.

    CRITICAL: split_details must add up (in cents) to amount.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the expense was for"
    )
    amount: Money = Field(
        ...,
        description="Total amount paid"
    )
    category: ExpenseCategory = Field(
        default=ExpenseCategory.OTHER,
        description="Expense category"
    )
    payer: str = Field(
        ...,
        min_length=1,
        description="Name of the participant who paid"
    )
    currency: Currency = Field(
        default=Currency.USD,
        description="Always the group's currency"
    )
    split_method: SplitMethod = Field(
        default=SplitMethod.EQUAL,
        description="How the expense was divided"
    )
    split_details: dict[str, Decimal] = Field(
        ...,
        description="Participant name -> owed amount"
    )
    # Kept so a percentage split can be recomputed when the amount is edited
    split_inputs: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Raw percentages for percentage splits"
    )
    date: UtcDatetime = Field(
        default_factory=datetime.utcnow,
        description="When the expense was recorded"
    )

    @model_validator(mode='after')
    def validate_split_reconciles(self) -> 'Expense':
        """Split details must be non-empty and sum to the amount exactly."""
        if not self.split_details:
            raise ValueError("Split details cannot be empty")

        if any(owed < 0 for owed in self.split_details.values()):
            raise ValueError("Split amounts cannot be negative")

        split_cents = sum(to_cents(owed) for owed in self.split_details.values())
        if split_cents != to_cents(self.amount):
            raise ValueError(
                f"Split details ({split_cents / 100:.2f}) must add up to "
                f"the expense amount ({self.amount})"
            )
        return self

    @property
    def referenced_participants(self) -> set[str]:
        """Everyone this expense mentions: the payer and all split keys."""
        return {self.payer, *self.split_details}


class Settlement(BaseModel):
    """
    A direct payment from one participant to another.

    Serialized with "from"/"to" keys to match the stored layout.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique settlement ID"
    )
    group_id: UUID = Field(
        ...,
        description="Group this settlement belongs to"
    )
    from_participant: str = Field(
        ...,
        alias="from",
        min_length=1,
        description="Who paid"
    )
    to_participant: str = Field(
        ...,
        alias="to",
        min_length=1,
        description="Who received"
    )
    amount: Money = Field(
        ...,
        description="Amount paid"
    )
    date: UtcDatetime = Field(
        default_factory=datetime.utcnow
    )

    @model_validator(mode='after')
    def validate_parties(self) -> 'Settlement':
        """A participant cannot settle with themselves."""
        if self.from_participant == self.to_participant:
            raise ValueError("Cannot settle with yourself")
        return self


class Group(BaseModel):
    """
    A group of participants sharing expenses.

    The group owns its participants and expenses. Settlements are
    stored separately, keyed by group id.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique group ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Group name"
    )
    currency: Currency = Field(
        default=Currency.USD,
        description="Currency for every expense in this group"
    )
    participants: list[Participant] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)
    created_at: UtcDatetime = Field(
        default_factory=datetime.utcnow
    )

    @field_validator('participants')
    @classmethod
    def validate_unique_names(cls, v: list[Participant]) -> list[Participant]:
        """Participant names must be unique within the group."""
        seen = set()
        for participant in v:
            if participant.name in seen:
                raise ValueError(f"Duplicate participant: {participant.name}")
            seen.add(participant.name)
        return v

    @property
    def participant_names(self) -> list[str]:
        """Participant names in group order."""
        return [p.name for p in self.participants]

    def has_participant(self, name: str) -> bool:
        return any(p.name == name for p in self.participants)

    def get_expense(self, expense_id: UUID) -> Optional[Expense]:
        for expense in self.expenses:
            if expense.id == expense_id:
                return expense
        return None


# =============================================================================
# DERIVED / REPORTING MODELS
# =============================================================================

class GroupSummary(BaseModel):
    """
    Headline statistics for a group.

    Derived on demand; never stored.
    """

    group_id: UUID
    currency: Currency
    total_expenses: Decimal
    participant_count: int = Field(ge=0)
    average_per_person: Decimal
    expense_count: int = Field(ge=0)
    total_settlements: Decimal
    category_totals: dict[ExpenseCategory, Decimal] = Field(default_factory=dict)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ExpenseDraft(BaseModel):
    """
    An expense as entered by the user, before it is split and stored.

    All fields are loose so that validation can report every problem
    at once instead of failing on the first.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = ""
    amount: Optional[Decimal] = None
    payer: Optional[str] = None
    category: ExpenseCategory = ExpenseCategory.OTHER
    split_method: SplitMethod = SplitMethod.EQUAL
    date: Optional[datetime] = None


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of the two-stage expense validation.

    Stage 1: Schema validation (required fields, formats)
    Stage 2: Semantic validation (plausibility checks)
    """

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    schema_valid: bool
    semantic_valid: bool
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
