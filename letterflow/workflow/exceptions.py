from letterflow.workflow.models import Action, Role, SubmissionStatus


class WorkflowError(Exception):
    """Base exception for all approval workflow errors."""

    code = "WORKFLOW_ERROR"


class NotFoundError(WorkflowError):
    code = "NOT_FOUND"


class SubmissionNotFoundError(NotFoundError):
    """Raised when a submission id is unknown."""

    def __init__(self, submission_id: str) -> None:
        self.submission_id = submission_id
        super().__init__(f"Submission {submission_id} not found")


class TemplateNotFoundError(NotFoundError):
    """Raised when a template id is unknown."""

    def __init__(self, template_id: str) -> None:
        self.template_id = template_id
        super().__init__(f"Template {template_id} not found")


class InvalidTransitionError(WorkflowError):
    """Raised when a (status, role, action) triple is not in the transition table.

    Also raised when a concurrent actor already moved the submission away
    from the expected status.
    """

    code = "INVALID_TRANSITION"

    def __init__(
        self,
        message: str,
        *,
        submission_id: str | None = None,
        status: SubmissionStatus | None = None,
        role: Role | None = None,
        action: Action | None = None,
    ) -> None:
        self.submission_id = submission_id
        self.status = status
        self.role = role
        self.action = action
        super().__init__(message)


class SubmissionValidationError(WorkflowError):
    """Raised on malformed input, e.g. a missing required reference or note."""

    code = "VALIDATION_ERROR"


class StorageUnavailableError(WorkflowError):
    """Raised when the database or blob store cannot be reached."""

    code = "STORAGE_UNAVAILABLE"
