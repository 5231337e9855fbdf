import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from letterflow.config.settings import Settings
from letterflow.database.connection import close_pool, get_connection, init_pool
from letterflow.database.models import UserRecord
from letterflow.database.repositories.template_repository import TemplateRepository
from letterflow.database.repositories.user_repository import UserRepository
from letterflow.database.schema import apply_schema
from letterflow.identity.password_hasher import PasswordHasher
from letterflow.workflow.exceptions import StorageUnavailableError
from letterflow.workflow.models import Template

TEST_PASSWORD = "correct horse battery staple"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "letterflow_test")
    return Settings(password_hash_iterations=1000)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            apply_schema(conn)
    except (StorageUnavailableError, psycopg.Error) as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[tuple[str, str]], None, None]:
    cleanup: list[tuple[str, str]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "templates":
                    cur.execute(
                        "DELETE FROM submissions WHERE template_id = %s::uuid", (row_id,)
                    )
                    cur.execute("DELETE FROM templates WHERE id = %s::uuid", (row_id,))
            for table, row_id in cleanup:
                if table == "users":
                    cur.execute("DELETE FROM users WHERE id = %s::uuid", (row_id,))
        conn.commit()


@pytest.fixture
def test_password() -> str:
    return TEST_PASSWORD


@pytest.fixture
def hasher(test_settings: Settings) -> PasswordHasher:
    return PasswordHasher(test_settings.password_hash_iterations)


@pytest.fixture
def seed_template(integration_cleanup: list[tuple[str, str]]) -> Template:
    template = TemplateRepository().create(
        name="Certificate of enrollment",
        file_ref="templates/enrollment.pdf",
        description="Confirms current enrollment",
    )
    integration_cleanup.append(("templates", template.id))
    return template


def _seed_user(
    cleanup: list[tuple[str, str]], hasher: PasswordHasher, prefix: str, role: str
) -> UserRecord:
    username = f"{prefix}-{os.urandom(4).hex()}"
    user = UserRepository().create(
        username=username,
        full_name=prefix.title(),
        password_hash=hasher.hash(TEST_PASSWORD),
        role=role,
    )
    cleanup.append(("users", user.id))
    return user


@pytest.fixture
def seed_users(
    integration_cleanup: list[tuple[str, str]], hasher: PasswordHasher
) -> dict[str, UserRecord]:
    return {
        role: _seed_user(integration_cleanup, hasher, role, role)
        for role in ("requester", "reviewer", "approver")
    }


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    return tmp_path
