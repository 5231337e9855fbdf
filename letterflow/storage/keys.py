from datetime import datetime
from pathlib import PurePosixPath

from letterflow.workflow.exceptions import SubmissionValidationError


def file_extension(filename: str) -> str:
    """Lowercase extension of ``filename`` without the dot."""
    suffix = PurePosixPath(filename).suffix
    return suffix[1:].lower()


def submission_file_key(owner_id: str, filename: str, now: datetime) -> str:
    """Owner-scoped key for an uploaded letter: {owner_id}/{epoch_millis}.{ext}"""
    extension = file_extension(filename)
    if not extension:
        raise SubmissionValidationError(f"File '{filename}' has no extension")
    return f"{owner_id}/{int(now.timestamp() * 1000)}.{extension}"


def approved_file_key(owner_id: str, submission_id: str, signed_at: datetime) -> str:
    """Key for the signed artifact: {owner_id}/approved/{submission_id}-{epoch_millis}.pdf

    Timestamped per signing attempt.
    """
    return f"{owner_id}/approved/{submission_id}-{int(signed_at.timestamp() * 1000)}.pdf"
