"""Approval state machine.

Pure decision logic: given the current status, the actor's role and the
requested action, return the next status and the stage fields to record,
or reject the transition. No I/O and no clock access when ``now`` is
supplied.
"""

from datetime import datetime, timezone

from letterflow.workflow.exceptions import InvalidTransitionError, SubmissionValidationError
from letterflow.workflow.models import (
    TERMINAL_STATUSES,
    Action,
    Role,
    StageFields,
    Submission,
    SubmissionDraft,
    SubmissionStatus,
    Subject,
    TransitionPatch,
)

TITLE_MAX_LENGTH = 255

DECISION_ACTIONS = frozenset({Action.APPROVE, Action.REJECT})

# (current status, actor role, action) -> next status. Anything absent is rejected.
TRANSITIONS: dict[tuple[SubmissionStatus | None, Role, Action], SubmissionStatus] = {
    (None, Role.REQUESTER, Action.CREATE): SubmissionStatus.SUBMITTED,
    (
        SubmissionStatus.SUBMITTED,
        Role.REVIEWER,
        Action.MARK_IN_REVIEW,
    ): SubmissionStatus.REVIEWED_BY_REVIEWER,
    (
        SubmissionStatus.REVIEWED_BY_REVIEWER,
        Role.REVIEWER,
        Action.APPROVE,
    ): SubmissionStatus.APPROVED_BY_REVIEWER,
    (
        SubmissionStatus.REVIEWED_BY_REVIEWER,
        Role.REVIEWER,
        Action.REJECT,
    ): SubmissionStatus.REJECTED_BY_REVIEWER,
    (
        SubmissionStatus.APPROVED_BY_REVIEWER,
        Role.APPROVER,
        Action.MARK_IN_REVIEW,
    ): SubmissionStatus.REVIEWED_BY_APPROVER,
    (
        SubmissionStatus.REVIEWED_BY_APPROVER,
        Role.APPROVER,
        Action.APPROVE,
    ): SubmissionStatus.COMPLETED,
    (
        SubmissionStatus.REVIEWED_BY_APPROVER,
        Role.APPROVER,
        Action.REJECT,
    ): SubmissionStatus.REJECTED_BY_APPROVER,
}

# Workflow position; every transition strictly increases it.
STAGE_ORDER: dict[SubmissionStatus, int] = {
    SubmissionStatus.SUBMITTED: 0,
    SubmissionStatus.REVIEWED_BY_REVIEWER: 1,
    SubmissionStatus.APPROVED_BY_REVIEWER: 2,
    SubmissionStatus.REJECTED_BY_REVIEWER: 2,
    SubmissionStatus.REVIEWED_BY_APPROVER: 3,
    SubmissionStatus.COMPLETED: 4,
    SubmissionStatus.REJECTED_BY_APPROVER: 4,
}

ACTIONABLE_STATUSES: dict[Role, frozenset[SubmissionStatus]] = {
    Role.REQUESTER: frozenset(),
    Role.REVIEWER: frozenset(
        {SubmissionStatus.SUBMITTED, SubmissionStatus.REVIEWED_BY_REVIEWER}
    ),
    Role.APPROVER: frozenset(
        {SubmissionStatus.APPROVED_BY_REVIEWER, SubmissionStatus.REVIEWED_BY_APPROVER}
    ),
}


def next_status(
    status: SubmissionStatus | None,
    role: Role,
    action: Action,
    submission_id: str | None = None,
) -> SubmissionStatus:
    """Look up the transition table.

    Raises:
        InvalidTransitionError: with a reason specific to the rejected triple.
    """
    target = TRANSITIONS.get((status, role, action))
    if target is not None:
        return target
    raise InvalidTransitionError(
        _rejection_reason(status, role, action, submission_id),
        submission_id=submission_id,
        status=status,
        role=role,
        action=action,
    )


def allowed_actions(status: SubmissionStatus | None, role: Role) -> list[Action]:
    """Actions the role may take from ``status``, in table order."""
    return [
        action
        for (from_status, from_role, action) in TRANSITIONS
        if from_status == status and from_role == role
    ]


def validate_draft(draft: SubmissionDraft) -> None:
    """Check creation-time input.

    Raises:
        SubmissionValidationError: on a missing reference or malformed title.
    """
    if not draft.owner_id:
        raise SubmissionValidationError("owner_id is required")
    if not draft.template_id:
        raise SubmissionValidationError("template_id is required")
    if not draft.submitted_file_ref:
        raise SubmissionValidationError("submitted_file_ref is required")
    title = (draft.title or "").strip()
    if not title:
        raise SubmissionValidationError("title must not be blank")
    if len(title) > TITLE_MAX_LENGTH:
        raise SubmissionValidationError(
            f"title must be at most {TITLE_MAX_LENGTH} characters"
        )


def authorize_create(subject: Subject) -> SubmissionStatus:
    """Gate submission creation on the subject's role."""
    return next_status(None, subject.role, Action.CREATE)


def decide(
    submission: Submission,
    subject: Subject,
    action: Action,
    notes: str | None = None,
    now: datetime | None = None,
    require_notes: bool = False,
) -> TransitionPatch:
    """Decide one transition for ``submission``.

    Returns the patch the store must apply atomically. A rejected decision
    raises and produces nothing.

    Raises:
        InvalidTransitionError: wrong status/role/action triple, including
            a replay against an already transitioned submission.
        SubmissionValidationError: notes are required by policy and missing.
    """
    if action is Action.CREATE:
        raise InvalidTransitionError(
            f"submission {submission.id} already exists; create is only valid for new submissions",
            submission_id=submission.id,
            status=submission.status,
            role=subject.role,
            action=action,
        )
    target = next_status(submission.status, subject.role, action, submission.id)

    cleaned_notes = _clean_notes(notes)
    if require_notes and action in DECISION_ACTIONS and cleaned_notes is None:
        raise SubmissionValidationError(
            f"notes are required to {action.value} submission {submission.id}"
        )

    return TransitionPatch(
        submission_id=submission.id,
        action=action,
        expected_status=submission.status,
        next_status=target,
        stage=subject.role,
        fields=StageFields(
            actor_id=subject.id,
            acted_at=now if now is not None else datetime.now(timezone.utc),
            notes=cleaned_notes,
        ),
    )


def _clean_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    stripped = notes.strip()
    return stripped or None


def _rejection_reason(
    status: SubmissionStatus | None,
    role: Role,
    action: Action,
    submission_id: str | None,
) -> str:
    label = f"submission {submission_id}" if submission_id else "submission"
    if status in TERMINAL_STATUSES:
        return (
            f"{label} is already {status.value}; no further actions are accepted"
        )
    legal_roles = {r for (s, r, _a) in TRANSITIONS if s == status}
    if role not in legal_roles:
        status_text = status.value if status is not None else "new"
        return f"role {role.value} cannot {action.value} a {status_text} {label}"
    expected = ", ".join(a.value for a in allowed_actions(status, role))
    status_text = status.value if status is not None else "new"
    return (
        f"cannot {action.value} {label} in status {status_text}; "
        f"allowed: {expected}"
    )
