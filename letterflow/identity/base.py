from abc import ABC, abstractmethod

from letterflow.workflow.models import Subject


class BaseIdentityResolver(ABC):
    """Contract for mapping credentials to a subject."""

    @abstractmethod
    def authenticate(self, username: str, secret: str) -> Subject:
        """Resolve credentials to a subject with exactly one role.

        Raises:
            InvalidCredentialsError: on an unknown username or a wrong secret.
        """
