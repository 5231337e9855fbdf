from datetime import datetime

from letterflow.signing.base import BaseSigner
from letterflow.signing.exceptions import SigningError


class CopySigner(BaseSigner):
    """Uses the submitted bytes unchanged as the approved artifact."""

    def sign(
        self,
        pdf_bytes: bytes,
        signed_by: str,
        signed_at: datetime,
        notes: str | None = None,
    ) -> bytes:
        _ = signed_by, signed_at, notes
        if not pdf_bytes:
            raise SigningError("Submitted file is empty")
        return bytes(pdf_bytes)
