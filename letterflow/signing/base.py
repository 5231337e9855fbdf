from abc import ABC, abstractmethod
from datetime import datetime


class BaseSigner(ABC):
    """Contract for approver-side rendering of the final signed artifact."""

    @abstractmethod
    def sign(
        self,
        pdf_bytes: bytes,
        signed_by: str,
        signed_at: datetime,
        notes: str | None = None,
    ) -> bytes:
        """Produce the approved artifact from the submitted letter.

        Args:
            pdf_bytes: Submitted PDF content.
            signed_by: Identifier of the approving subject.
            signed_at: Time of the approval decision.
            notes: Optional approver notes to include in the stamp.

        Returns:
            Bytes of the approved artifact. Never empty.

        Raises:
            SigningError: if the artifact cannot be produced.
        """


def approval_stamp(signed_by: str, signed_at: datetime, notes: str | None = None) -> str:
    """Text placed on the approved letter."""
    stamp = f"Approved by {signed_by} on {signed_at:%Y-%m-%d %H:%M} UTC"
    if notes:
        stamp += f"\nNotes: {notes}"
    return stamp
