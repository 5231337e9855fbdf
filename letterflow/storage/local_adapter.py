from pathlib import Path

from letterflow.storage.base import BaseBlobStore
from letterflow.workflow.exceptions import StorageUnavailableError, SubmissionValidationError


class LocalBlobStore(BaseBlobStore):
    """Stores blobs as files below a root directory. The reference is the key."""

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None, base_url: str = "/files") -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT
        self._base_url = base_url.rstrip("/")

    def put(self, key: str, data: bytes) -> str:
        path = self._resolve_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StorageUnavailableError(f"Failed to write blob '{key}': {exc}") from exc
        return key

    def get(self, ref: str) -> bytes:
        path = self._resolve_path(ref)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageUnavailableError(f"Failed to read blob '{ref}': {exc}") from exc

    def url_for(self, ref: str) -> str:
        self._resolve_path(ref)
        return f"{self._base_url}/{ref}"

    def _resolve_path(self, key: str) -> Path:
        """Map a key below the root.

        Raises:
            SubmissionValidationError: if the key is empty or escapes the root.
        """
        if not key or key.startswith("/"):
            raise SubmissionValidationError(f"Invalid blob key '{key}'")
        root = self._files_root.resolve()
        path = (root / key).resolve()
        if not path.is_relative_to(root) or path == root:
            raise SubmissionValidationError(f"Invalid blob key '{key}'")
        return path
