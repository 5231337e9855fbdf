import uuid
from collections.abc import Iterable
from typing import Any

from psycopg.rows import dict_row

from letterflow.database.connection import get_connection
from letterflow.database.models import SUBMISSION_COLUMNS
from letterflow.workflow.exceptions import (
    InvalidTransitionError,
    SubmissionNotFoundError,
    SubmissionValidationError,
)
from letterflow.workflow.models import (
    Role,
    Submission,
    SubmissionDraft,
    SubmissionStatus,
    TransitionPatch,
)
from letterflow.workflow.state_machine import validate_draft

_SELECT_COLUMNS = ", ".join(SUBMISSION_COLUMNS)

_STAGE_COLUMNS: dict[Role, tuple[str, str, str]] = {
    Role.REVIEWER: ("reviewer_id", "reviewer_notes", "reviewer_acted_at"),
    Role.APPROVER: ("approver_id", "approver_notes", "approver_acted_at"),
}


def _parse_id(submission_id: str) -> str | None:
    try:
        return str(uuid.UUID(str(submission_id)))
    except ValueError:
        return None


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def row_to_submission(row: dict[str, Any]) -> Submission:
    """Map a submissions row onto the domain dataclass."""
    return Submission(
        id=str(row["id"]),
        template_id=str(row["template_id"]),
        owner_id=str(row["owner_id"]),
        title=row["title"],
        description=row["description"],
        status=SubmissionStatus(row["status"]),
        submitted_file_ref=row["submitted_file_ref"],
        approved_file_ref=row["approved_file_ref"],
        reviewer_notes=row["reviewer_notes"],
        reviewer_id=_optional_str(row["reviewer_id"]),
        reviewer_acted_at=row["reviewer_acted_at"],
        approver_notes=row["approver_notes"],
        approver_id=_optional_str(row["approver_id"]),
        approver_acted_at=row["approver_acted_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SubmissionRepository:
    """Database operations for the submissions table.

    ``apply_transition`` is the only mutation path after creation.
    """

    def create(self, draft: SubmissionDraft) -> Submission:
        """Insert a new submission in the initial status.

        Raises:
            SubmissionValidationError: if the draft is malformed.
        """
        validate_draft(draft)
        submission_id = str(uuid.uuid4())
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO submissions
                    (id, template_id, owner_id, title, description, status,
                     submitted_file_ref)
                    VALUES (%s::uuid, %s::uuid, %s::uuid, %s, %s,
                            %s::submission_status, %s)
                    RETURNING {_SELECT_COLUMNS}
                    """,
                    (
                        submission_id,
                        draft.template_id,
                        draft.owner_id,
                        draft.title.strip(),
                        draft.description,
                        SubmissionStatus.SUBMITTED.value,
                        draft.submitted_file_ref,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(f"Insert of submission {submission_id} returned no row")
        return row_to_submission(row)

    def get(self, submission_id: str) -> Submission:
        """Find a submission by ID.

        Raises:
            SubmissionNotFoundError: if no submission with this ID exists.
        """
        parsed_id = _parse_id(submission_id)
        if parsed_id is None:
            raise SubmissionNotFoundError(submission_id)
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_SELECT_COLUMNS}
                    FROM submissions
                    WHERE id = %s::uuid
                    """,
                    (parsed_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise SubmissionNotFoundError(submission_id)
        return row_to_submission(row)

    def list_by_filter(
        self,
        statuses: Iterable[SubmissionStatus],
        owner_id: str | None = None,
        reviewer_id: str | None = None,
    ) -> list[Submission]:
        """List submissions in any of ``statuses``, newest first.

        ``owner_id`` and ``reviewer_id`` narrow the result further when given.
        """
        status_values = sorted({SubmissionStatus(s).value for s in statuses})
        if not status_values:
            return []
        clauses = ["status = ANY(%s::submission_status[])"]
        params: list[Any] = [status_values]
        if owner_id is not None:
            clauses.append("owner_id = %s::uuid")
            params.append(owner_id)
        if reviewer_id is not None:
            clauses.append("reviewer_id = %s::uuid")
            params.append(reviewer_id)

        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_SELECT_COLUMNS}
                    FROM submissions
                    WHERE {" AND ".join(clauses)}
                    ORDER BY created_at DESC, id
                    """,
                    tuple(params),
                )
                rows = cur.fetchall()

        return [row_to_submission(row) for row in rows]

    def apply_transition(
        self,
        patch: TransitionPatch,
        approved_file_ref: str | None = None,
    ) -> Submission:
        """Apply a state machine patch with compare-and-swap on the status.

        The update only matches while the stored status still equals
        ``patch.expected_status``; a concurrent actor that got there first
        makes this call fail and leaves the row untouched.

        Raises:
            SubmissionNotFoundError: if the submission does not exist.
            InvalidTransitionError: if the stored status no longer matches.
            SubmissionValidationError: if ``approved_file_ref`` does not
                accompany exactly the completing transition.
        """
        if patch.produces_approved_file and not approved_file_ref:
            raise SubmissionValidationError(
                f"approved_file_ref is required to complete submission {patch.submission_id}"
            )
        if not patch.produces_approved_file and approved_file_ref is not None:
            raise SubmissionValidationError(
                f"approved_file_ref may only be set when completing submission "
                f"{patch.submission_id}"
            )
        parsed_id = _parse_id(patch.submission_id)
        if parsed_id is None:
            raise SubmissionNotFoundError(patch.submission_id)

        id_column, notes_column, acted_at_column = _STAGE_COLUMNS[patch.stage]
        current: dict[str, Any] | None = None
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    UPDATE submissions
                    SET status = %s::submission_status,
                        {id_column} = COALESCE({id_column}, %s::uuid),
                        {notes_column} = COALESCE(%s, {notes_column}),
                        {acted_at_column} = %s,
                        approved_file_ref = COALESCE(%s, approved_file_ref),
                        updated_at = %s
                    WHERE id = %s::uuid
                      AND status = %s::submission_status
                    RETURNING {_SELECT_COLUMNS}
                    """,
                    (
                        patch.next_status.value,
                        patch.fields.actor_id,
                        patch.fields.notes,
                        patch.fields.acted_at,
                        approved_file_ref,
                        patch.fields.acted_at,
                        parsed_id,
                        patch.expected_status.value,
                    ),
                )
                row = cur.fetchone()
                if row is None:
                    cur.execute(
                        "SELECT status FROM submissions WHERE id = %s::uuid",
                        (parsed_id,),
                    )
                    current = cur.fetchone()
            conn.commit()

        if row is not None:
            return row_to_submission(row)
        if current is None:
            raise SubmissionNotFoundError(patch.submission_id)
        current_status = SubmissionStatus(current["status"])
        raise InvalidTransitionError(
            f"submission {patch.submission_id} was already moved from "
            f"{patch.expected_status.value} to {current_status.value} by another action",
            submission_id=patch.submission_id,
            status=current_status,
            role=patch.stage,
            action=patch.action,
        )
