from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timezone

from letterflow.database.repositories.submission_repository import SubmissionRepository
from letterflow.workflow.models import Role, RoleView, Submission, SubmissionStatus, Subject
from letterflow.workflow.state_machine import ACTIONABLE_STATUSES

REVIEWER_HISTORY_STATUSES = frozenset(
    {
        SubmissionStatus.APPROVED_BY_REVIEWER,
        SubmissionStatus.REJECTED_BY_REVIEWER,
        SubmissionStatus.REVIEWED_BY_APPROVER,
        SubmissionStatus.REJECTED_BY_APPROVER,
        SubmissionStatus.COMPLETED,
    }
)

APPROVER_HISTORY_STATUSES = frozenset(
    {SubmissionStatus.COMPLETED, SubmissionStatus.REJECTED_BY_APPROVER}
)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def count_by_status(submissions: Iterable[Submission]) -> dict[SubmissionStatus, int]:
    """Count submissions per status. Every status is present, zero-filled."""
    counter = Counter(submission.status for submission in submissions)
    return {status: counter.get(status, 0) for status in SubmissionStatus}


def _newest_first(submissions: Iterable[Submission]) -> list[Submission]:
    return sorted(submissions, key=lambda s: s.created_at or _OLDEST, reverse=True)


class ViewProjector:
    """Role-scoped lists and counters derived from the submission store.

    Counts are always recomputed from the returned list; nothing is cached.
    """

    def __init__(self, submission_repo: SubmissionRepository) -> None:
        self._submission_repo = submission_repo

    def view_for(self, subject: Subject, include_history: bool = False) -> RoleView:
        if subject.role is Role.REQUESTER:
            return self.requester_view(subject)
        if subject.role is Role.REVIEWER:
            return self.reviewer_view(subject, include_history=include_history)
        return self.approver_view(subject, include_history=include_history)

    def requester_view(self, subject: Subject) -> RoleView:
        """Everything the requester owns, all statuses, newest first."""
        submissions = self._submission_repo.list_by_filter(
            SubmissionStatus, owner_id=subject.id
        )
        return self._build(Role.REQUESTER, submissions)

    def reviewer_view(self, subject: Subject, include_history: bool = False) -> RoleView:
        """Submissions awaiting first-line review.

        With ``include_history``, also the submissions this reviewer has
        already moved past the review stage.
        """
        submissions = self._submission_repo.list_by_filter(
            ACTIONABLE_STATUSES[Role.REVIEWER]
        )
        if include_history:
            acted_on = self._submission_repo.list_by_filter(
                REVIEWER_HISTORY_STATUSES, reviewer_id=subject.id
            )
            submissions = _newest_first([*submissions, *acted_on])
        return self._build(Role.REVIEWER, submissions)

    def approver_view(self, subject: Subject, include_history: bool = False) -> RoleView:
        """Submissions awaiting final approval, plus closed ones on request."""
        _ = subject
        statuses = set(ACTIONABLE_STATUSES[Role.APPROVER])
        if include_history:
            statuses |= APPROVER_HISTORY_STATUSES
        submissions = self._submission_repo.list_by_filter(statuses)
        return self._build(Role.APPROVER, submissions)

    @staticmethod
    def _build(role: Role, submissions: list[Submission]) -> RoleView:
        counts = count_by_status(submissions)
        actionable = sum(counts[status] for status in ACTIONABLE_STATUSES[role])
        return RoleView(
            role=role,
            submissions=submissions,
            counts=counts,
            actionable_count=actionable,
        )
