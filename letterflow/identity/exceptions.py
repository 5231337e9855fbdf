from letterflow.workflow.exceptions import WorkflowError


class AuthError(WorkflowError):
    """Base exception for authentication failures."""

    code = "AUTH_ERROR"


class InvalidCredentialsError(AuthError):
    """Raised for an unknown username or a wrong secret, without saying which."""

    code = "INVALID_CREDENTIALS"

    def __init__(self) -> None:
        super().__init__("Invalid username or password")
