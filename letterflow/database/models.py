from dataclasses import dataclass
from datetime import datetime


@dataclass
class UserRecord:
    """Represents a row from the users table."""

    id: str
    username: str
    full_name: str
    password_hash: str
    role: str
    created_at: datetime | None = None


SUBMISSION_COLUMNS = (
    "id",
    "template_id",
    "owner_id",
    "title",
    "description",
    "status",
    "submitted_file_ref",
    "approved_file_ref",
    "reviewer_notes",
    "reviewer_id",
    "reviewer_acted_at",
    "approver_notes",
    "approver_id",
    "approver_acted_at",
    "created_at",
    "updated_at",
)

TEMPLATE_COLUMNS = ("id", "name", "description", "file_ref")
