from letterflow.database.repositories.user_repository import UserRepository
from letterflow.identity.base import BaseIdentityResolver
from letterflow.identity.exceptions import InvalidCredentialsError
from letterflow.identity.password_hasher import PasswordHasher
from letterflow.logging.logger import Log
from letterflow.workflow.models import Role, Subject


class DatabaseIdentityResolver(BaseIdentityResolver):
    """Authenticates against the users table."""

    def __init__(self, user_repo: UserRepository, hasher: PasswordHasher) -> None:
        self._user_repo = user_repo
        self._hasher = hasher
        # Checked for unknown usernames too.
        self._dummy_hash = hasher.hash("letterflow-dummy-secret")

    def authenticate(self, username: str, secret: str) -> Subject:
        user = self._user_repo.find_by_username(username.strip())
        if user is None:
            self._hasher.verify(secret, self._dummy_hash)
            Log.warning("Login rejected: invalid credentials")
            raise InvalidCredentialsError()

        if not self._hasher.verify(secret, user.password_hash):
            Log.warning("Login rejected: invalid credentials")
            raise InvalidCredentialsError()

        try:
            role = Role(user.role)
        except ValueError as exc:
            Log.error(f"User {user.id} has unsupported role '{user.role}'")
            raise InvalidCredentialsError() from exc

        Log.info(f"User {user.id} authenticated as {role.value}")
        return Subject(id=user.id, role=role)
