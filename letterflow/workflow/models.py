from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Closed set of roles a subject can hold."""

    REQUESTER = "requester"
    REVIEWER = "reviewer"
    APPROVER = "approver"


class SubmissionStatus(str, Enum):
    SUBMITTED = "submitted"
    REVIEWED_BY_REVIEWER = "reviewed_by_reviewer"
    APPROVED_BY_REVIEWER = "approved_by_reviewer"
    REJECTED_BY_REVIEWER = "rejected_by_reviewer"
    REVIEWED_BY_APPROVER = "reviewed_by_approver"
    REJECTED_BY_APPROVER = "rejected_by_approver"
    COMPLETED = "completed"


class Action(str, Enum):
    CREATE = "create"
    MARK_IN_REVIEW = "mark_in_review"
    APPROVE = "approve"
    REJECT = "reject"


TERMINAL_STATUSES = frozenset(
    {
        SubmissionStatus.REJECTED_BY_REVIEWER,
        SubmissionStatus.REJECTED_BY_APPROVER,
        SubmissionStatus.COMPLETED,
    }
)


@dataclass(frozen=True)
class Subject:
    """Authenticated actor. Derived per request, never persisted."""

    id: str
    role: Role


@dataclass(frozen=True)
class Template:
    """Letter template reference data."""

    id: str
    name: str
    description: str | None
    file_ref: str


@dataclass(frozen=True)
class SubmissionDraft:
    """Input for creating a submission."""

    template_id: str
    owner_id: str
    title: str
    submitted_file_ref: str
    description: str | None = None


@dataclass(frozen=True)
class Submission:
    """A letter request and its position in the approval workflow."""

    id: str
    template_id: str
    owner_id: str
    title: str
    status: SubmissionStatus
    submitted_file_ref: str
    description: str | None = None
    approved_file_ref: str | None = None
    reviewer_notes: str | None = None
    reviewer_id: str | None = None
    reviewer_acted_at: datetime | None = None
    approver_notes: str | None = None
    approver_id: str | None = None
    approver_acted_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


@dataclass(frozen=True)
class StageFields:
    """Audit fields written by one stage of the workflow."""

    actor_id: str
    acted_at: datetime
    notes: str | None = None


@dataclass(frozen=True)
class TransitionPatch:
    """Field patch produced by the state machine for one accepted transition.

    ``expected_status`` is the pre-state captured at decision time and is
    used by the store as the compare-and-swap guard.
    """

    submission_id: str
    action: Action
    expected_status: SubmissionStatus
    next_status: SubmissionStatus
    stage: Role
    fields: StageFields

    @property
    def produces_approved_file(self) -> bool:
        return self.next_status is SubmissionStatus.COMPLETED


@dataclass(frozen=True)
class ProgressStep:
    key: str
    label: str
    completed: bool = False


@dataclass(frozen=True)
class RoleView:
    """Role-scoped dashboard: submissions plus counts derived from them."""

    role: Role
    submissions: list[Submission] = field(default_factory=list)
    counts: dict[SubmissionStatus, int] = field(default_factory=dict)
    actionable_count: int = 0
