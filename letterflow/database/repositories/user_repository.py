import uuid

from psycopg.rows import dict_row

from letterflow.database.connection import get_connection
from letterflow.database.models import UserRecord


class UserRepository:
    """Database operations for the users table."""

    def find_by_username(self, username: str) -> UserRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, username, full_name, password_hash, role, created_at
                    FROM users
                    WHERE username = %s
                    """,
                    (username,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return UserRecord(
            id=str(row["id"]),
            username=row["username"],
            full_name=row["full_name"],
            password_hash=row["password_hash"],
            role=str(row["role"]),
            created_at=row["created_at"],
        )

    def create(
        self,
        username: str,
        full_name: str,
        password_hash: str,
        role: str,
    ) -> UserRecord:
        """Insert a user account with an already hashed password."""
        user_id = str(uuid.uuid4())
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO users (id, username, full_name, password_hash, role)
                VALUES (%s::uuid, %s, %s, %s, %s::user_role)
                """,
                (user_id, username, full_name, password_hash, role),
            )
            conn.commit()
        return UserRecord(
            id=user_id,
            username=username,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
        )
