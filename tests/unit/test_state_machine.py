import itertools
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from letterflow.workflow.exceptions import InvalidTransitionError, SubmissionValidationError
from letterflow.workflow.models import (
    TERMINAL_STATUSES,
    Action,
    Role,
    Submission,
    SubmissionDraft,
    SubmissionStatus,
    Subject,
)
from letterflow.workflow.state_machine import (
    STAGE_ORDER,
    TRANSITIONS,
    allowed_actions,
    authorize_create,
    decide,
    next_status,
    validate_draft,
)

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)

REQUESTER = Subject(id="r1", role=Role.REQUESTER)
REVIEWER = Subject(id="v1", role=Role.REVIEWER)
APPROVER = Subject(id="a1", role=Role.APPROVER)


def _make_submission(status: SubmissionStatus = SubmissionStatus.SUBMITTED) -> Submission:
    return Submission(
        id="s1",
        template_id="t1",
        owner_id="r1",
        title="Certificate of enrollment",
        status=status,
        submitted_file_ref="r1/1700000000000.pdf",
    )


class TestTransitionTable:
    @pytest.mark.parametrize(
        ("status", "role", "action", "expected"),
        [
            (None, Role.REQUESTER, Action.CREATE, SubmissionStatus.SUBMITTED),
            (
                SubmissionStatus.SUBMITTED,
                Role.REVIEWER,
                Action.MARK_IN_REVIEW,
                SubmissionStatus.REVIEWED_BY_REVIEWER,
            ),
            (
                SubmissionStatus.REVIEWED_BY_REVIEWER,
                Role.REVIEWER,
                Action.APPROVE,
                SubmissionStatus.APPROVED_BY_REVIEWER,
            ),
            (
                SubmissionStatus.REVIEWED_BY_REVIEWER,
                Role.REVIEWER,
                Action.REJECT,
                SubmissionStatus.REJECTED_BY_REVIEWER,
            ),
            (
                SubmissionStatus.APPROVED_BY_REVIEWER,
                Role.APPROVER,
                Action.MARK_IN_REVIEW,
                SubmissionStatus.REVIEWED_BY_APPROVER,
            ),
            (
                SubmissionStatus.REVIEWED_BY_APPROVER,
                Role.APPROVER,
                Action.APPROVE,
                SubmissionStatus.COMPLETED,
            ),
            (
                SubmissionStatus.REVIEWED_BY_APPROVER,
                Role.APPROVER,
                Action.REJECT,
                SubmissionStatus.REJECTED_BY_APPROVER,
            ),
        ],
    )
    def test_listed_transitions(self, status, role, action, expected) -> None:
        assert next_status(status, role, action) is expected

    def test_table_has_exactly_seven_entries(self) -> None:
        assert len(TRANSITIONS) == 7

    def test_every_unlisted_triple_is_rejected(self) -> None:
        statuses: list[SubmissionStatus | None] = [None, *SubmissionStatus]
        for status, role, action in itertools.product(statuses, Role, Action):
            if (status, role, action) in TRANSITIONS:
                continue
            with pytest.raises(InvalidTransitionError):
                next_status(status, role, action)

    def test_terminal_statuses_have_no_outgoing_transitions(self) -> None:
        for status in TERMINAL_STATUSES:
            for role in Role:
                assert allowed_actions(status, role) == []

    def test_transitions_are_monotonic(self) -> None:
        for (status, _role, _action), target in TRANSITIONS.items():
            if status is None:
                continue
            assert STAGE_ORDER[target] > STAGE_ORDER[status]

    def test_only_approver_approve_reaches_completed(self) -> None:
        sources = [key for key, target in TRANSITIONS.items() if target is SubmissionStatus.COMPLETED]
        assert sources == [
            (SubmissionStatus.REVIEWED_BY_APPROVER, Role.APPROVER, Action.APPROVE)
        ]


class TestAllowedActions:
    def test_reviewer_on_submitted(self) -> None:
        assert allowed_actions(SubmissionStatus.SUBMITTED, Role.REVIEWER) == [
            Action.MARK_IN_REVIEW
        ]

    def test_reviewer_in_review(self) -> None:
        assert allowed_actions(SubmissionStatus.REVIEWED_BY_REVIEWER, Role.REVIEWER) == [
            Action.APPROVE,
            Action.REJECT,
        ]

    def test_requester_never_acts_after_creation(self) -> None:
        for status in SubmissionStatus:
            assert allowed_actions(status, Role.REQUESTER) == []

    def test_create_for_new_submission(self) -> None:
        assert allowed_actions(None, Role.REQUESTER) == [Action.CREATE]


class TestRejectionReasons:
    def test_terminal_reason(self) -> None:
        with pytest.raises(InvalidTransitionError, match="already completed"):
            next_status(SubmissionStatus.COMPLETED, Role.APPROVER, Action.APPROVE, "s1")

    def test_role_reason(self) -> None:
        with pytest.raises(InvalidTransitionError, match="role requester cannot approve"):
            next_status(SubmissionStatus.REVIEWED_BY_REVIEWER, Role.REQUESTER, Action.APPROVE)

    def test_wrong_action_lists_allowed_actions(self) -> None:
        with pytest.raises(InvalidTransitionError, match="allowed: mark_in_review"):
            next_status(SubmissionStatus.SUBMITTED, Role.REVIEWER, Action.APPROVE)

    def test_error_carries_triple(self) -> None:
        with pytest.raises(InvalidTransitionError) as exc_info:
            next_status(SubmissionStatus.SUBMITTED, Role.APPROVER, Action.APPROVE, "s9")
        error = exc_info.value
        assert error.code == "INVALID_TRANSITION"
        assert error.submission_id == "s9"
        assert error.status is SubmissionStatus.SUBMITTED
        assert error.role is Role.APPROVER
        assert error.action is Action.APPROVE


class TestAuthorizeCreate:
    def test_requester_may_create(self) -> None:
        assert authorize_create(REQUESTER) is SubmissionStatus.SUBMITTED

    @pytest.mark.parametrize("subject", [REVIEWER, APPROVER])
    def test_other_roles_may_not_create(self, subject: Subject) -> None:
        with pytest.raises(InvalidTransitionError):
            authorize_create(subject)


class TestDecide:
    def test_reviewer_mark_in_review_patch(self) -> None:
        patch = decide(_make_submission(), REVIEWER, Action.MARK_IN_REVIEW, now=NOW)

        assert patch.submission_id == "s1"
        assert patch.expected_status is SubmissionStatus.SUBMITTED
        assert patch.next_status is SubmissionStatus.REVIEWED_BY_REVIEWER
        assert patch.stage is Role.REVIEWER
        assert patch.fields.actor_id == "v1"
        assert patch.fields.acted_at == NOW
        assert patch.fields.notes is None
        assert patch.produces_approved_file is False

    def test_approver_approve_produces_approved_file(self) -> None:
        submission = _make_submission(SubmissionStatus.REVIEWED_BY_APPROVER)

        patch = decide(submission, APPROVER, Action.APPROVE, notes="Signed", now=NOW)

        assert patch.next_status is SubmissionStatus.COMPLETED
        assert patch.stage is Role.APPROVER
        assert patch.fields.notes == "Signed"
        assert patch.produces_approved_file is True

    def test_notes_are_stripped_and_blank_becomes_none(self) -> None:
        submission = _make_submission(SubmissionStatus.REVIEWED_BY_REVIEWER)

        assert decide(submission, REVIEWER, Action.APPROVE, notes="  ok  ").fields.notes == "ok"
        assert decide(submission, REVIEWER, Action.APPROVE, notes="   ").fields.notes is None

    def test_uses_current_time_when_now_missing(self) -> None:
        before = datetime.now(timezone.utc)
        patch = decide(_make_submission(), REVIEWER, Action.MARK_IN_REVIEW)
        assert patch.fields.acted_at >= before
        assert patch.fields.acted_at.tzinfo is not None

    def test_requester_cannot_advance_own_submission(self) -> None:
        for status in SubmissionStatus:
            for action in (Action.MARK_IN_REVIEW, Action.APPROVE, Action.REJECT):
                with pytest.raises(InvalidTransitionError):
                    decide(_make_submission(status), REQUESTER, action, now=NOW)

    def test_create_on_existing_submission_is_rejected(self) -> None:
        with pytest.raises(InvalidTransitionError, match="already exists"):
            decide(_make_submission(), REQUESTER, Action.CREATE, now=NOW)

    def test_replay_against_transitioned_submission_is_rejected(self) -> None:
        submission = _make_submission()
        patch = decide(submission, REVIEWER, Action.MARK_IN_REVIEW, now=NOW)
        moved = replace(submission, status=patch.next_status)

        with pytest.raises(InvalidTransitionError):
            decide(moved, REVIEWER, Action.MARK_IN_REVIEW, now=NOW)

    def test_rejected_decision_leaves_submission_unchanged(self) -> None:
        submission = _make_submission(SubmissionStatus.COMPLETED)
        snapshot = replace(submission)

        with pytest.raises(InvalidTransitionError):
            decide(submission, APPROVER, Action.REJECT, now=NOW)

        assert submission == snapshot


class TestNotesPolicy:
    @pytest.mark.parametrize("action", [Action.APPROVE, Action.REJECT])
    def test_decisions_require_notes_when_enabled(self, action: Action) -> None:
        submission = _make_submission(SubmissionStatus.REVIEWED_BY_REVIEWER)
        with pytest.raises(SubmissionValidationError, match="notes are required"):
            decide(submission, REVIEWER, action, notes=" ", now=NOW, require_notes=True)

    def test_mark_in_review_never_requires_notes(self) -> None:
        patch = decide(
            _make_submission(), REVIEWER, Action.MARK_IN_REVIEW, now=NOW, require_notes=True
        )
        assert patch.next_status is SubmissionStatus.REVIEWED_BY_REVIEWER

    def test_invalid_transition_wins_over_missing_notes(self) -> None:
        submission = _make_submission(SubmissionStatus.COMPLETED)
        with pytest.raises(InvalidTransitionError):
            decide(submission, APPROVER, Action.REJECT, now=NOW, require_notes=True)


class TestValidateDraft:
    def _draft(self, **overrides: str) -> SubmissionDraft:
        values = {
            "template_id": "t1",
            "owner_id": "r1",
            "title": "Internship letter",
            "submitted_file_ref": "r1/1.pdf",
        }
        values.update(overrides)
        return SubmissionDraft(**values)

    def test_accepts_valid_draft(self) -> None:
        validate_draft(self._draft())

    @pytest.mark.parametrize("field", ["template_id", "owner_id", "submitted_file_ref"])
    def test_missing_reference(self, field: str) -> None:
        with pytest.raises(SubmissionValidationError, match=field):
            validate_draft(self._draft(**{field: ""}))

    def test_blank_title(self) -> None:
        with pytest.raises(SubmissionValidationError, match="title"):
            validate_draft(self._draft(title="   "))

    def test_title_too_long(self) -> None:
        with pytest.raises(SubmissionValidationError, match="at most 255"):
            validate_draft(self._draft(title="x" * 256))
