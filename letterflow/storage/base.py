from abc import ABC, abstractmethod


class BaseBlobStore(ABC):
    """Contract for opaque blob storage addressed by reference strings."""

    @abstractmethod
    def put(self, key: str, data: bytes) -> str:
        """Store ``data`` under an owner-scoped ``key`` and return its reference.

        Raises:
            StorageUnavailableError: if the backend cannot be written.
        """

    @abstractmethod
    def get(self, ref: str) -> bytes:
        """Return the bytes stored under ``ref``.

        Raises:
            StorageUnavailableError: if the blob cannot be read.
        """

    @abstractmethod
    def url_for(self, ref: str) -> str:
        """Return a downloadable URL for ``ref``."""
