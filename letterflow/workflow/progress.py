from letterflow.workflow.models import ProgressStep, SubmissionStatus

STATUS_LABELS: dict[SubmissionStatus, str] = {
    SubmissionStatus.SUBMITTED: "Submitted",
    SubmissionStatus.REVIEWED_BY_REVIEWER: "In review by reviewer",
    SubmissionStatus.APPROVED_BY_REVIEWER: "Approved by reviewer, awaiting approver",
    SubmissionStatus.REJECTED_BY_REVIEWER: "Rejected by reviewer",
    SubmissionStatus.REVIEWED_BY_APPROVER: "In review by approver",
    SubmissionStatus.REJECTED_BY_APPROVER: "Rejected by approver",
    SubmissionStatus.COMPLETED: "Completed",
}

STEPS: tuple[tuple[str, str], ...] = (
    ("submitted", "Submitted"),
    ("reviewer_review", "Reviewer review"),
    ("approver_review", "Approver review"),
    ("completed", "Completed"),
)

# Number of leading steps reached for each status.
_STEPS_REACHED: dict[SubmissionStatus, int] = {
    SubmissionStatus.SUBMITTED: 1,
    SubmissionStatus.REVIEWED_BY_REVIEWER: 1,
    SubmissionStatus.REJECTED_BY_REVIEWER: 1,
    SubmissionStatus.APPROVED_BY_REVIEWER: 2,
    SubmissionStatus.REVIEWED_BY_APPROVER: 2,
    SubmissionStatus.REJECTED_BY_APPROVER: 2,
    SubmissionStatus.COMPLETED: 4,
}


def status_label(status: SubmissionStatus) -> str:
    return STATUS_LABELS[SubmissionStatus(status)]


def progress_steps(status: SubmissionStatus) -> list[ProgressStep]:
    """Requester-facing progress tracker.

    A stage step is completed once that stage has signed off. Rejected
    submissions keep only the steps reached before the rejection.
    """
    reached = _STEPS_REACHED[SubmissionStatus(status)]
    return [
        ProgressStep(key=key, label=label, completed=index < reached)
        for index, (key, label) in enumerate(STEPS)
    ]
