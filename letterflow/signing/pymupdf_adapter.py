from datetime import datetime

import pymupdf

from letterflow.signing.base import BaseSigner, approval_stamp
from letterflow.signing.exceptions import SigningError

_MARGIN = 36
_FONT_SIZE = 8


class PyMuPdfSigner(BaseSigner):
    """Stamps an approval footer on every page using PyMuPDF."""

    def sign(
        self,
        pdf_bytes: bytes,
        signed_by: str,
        signed_at: datetime,
        notes: str | None = None,
    ) -> bytes:
        stamp = approval_stamp(signed_by, signed_at, notes)
        line_count = stamp.count("\n") + 1
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                if doc.page_count == 0:
                    raise SigningError("Submitted PDF has no pages")
                for page in doc:
                    baseline = page.rect.height - _MARGIN - (line_count - 1) * _FONT_SIZE * 1.2
                    page.insert_text(
                        pymupdf.Point(_MARGIN, baseline),
                        stamp,
                        fontsize=_FONT_SIZE,
                    )
                return doc.tobytes()
        except SigningError:
            raise
        except Exception as exc:
            raise SigningError(f"pymupdf signing failed: {exc}") from exc
