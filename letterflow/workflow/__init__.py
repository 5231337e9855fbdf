from letterflow.workflow.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    StorageUnavailableError,
    SubmissionNotFoundError,
    SubmissionValidationError,
    TemplateNotFoundError,
    WorkflowError,
)
from letterflow.workflow.models import Action, Role, Submission, SubmissionStatus, Subject
from letterflow.workflow.state_machine import TRANSITIONS, allowed_actions, decide, next_status

__all__ = [
    "TRANSITIONS",
    "Action",
    "InvalidTransitionError",
    "NotFoundError",
    "Role",
    "StorageUnavailableError",
    "Subject",
    "Submission",
    "SubmissionNotFoundError",
    "SubmissionStatus",
    "SubmissionValidationError",
    "TemplateNotFoundError",
    "WorkflowError",
    "allowed_actions",
    "decide",
    "next_status",
]
