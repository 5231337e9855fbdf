from dataclasses import dataclass
from enum import Enum


class NotificationKind(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class NotificationEvent:
    """Human-readable outcome of a workflow request."""

    kind: NotificationKind
    submission_id: str | None
    message: str
