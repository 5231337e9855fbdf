from letterflow.workflow.exceptions import WorkflowError


class SigningError(WorkflowError):
    """Raised when the final artifact cannot be rendered from the submitted file."""

    code = "SIGNING_FAILED"
