from pathlib import Path

from letterflow.config.settings import Settings
from letterflow.storage.base import BaseBlobStore
from letterflow.storage.local_adapter import LocalBlobStore


class BlobStoreFactory:
    """Creates the configured blob store adapter."""

    BACKENDS: tuple[str, ...] = ("local",)

    @classmethod
    def create(cls, settings: Settings) -> BaseBlobStore:
        backend = settings.storage_backend.lower()
        if backend == "local":
            return LocalBlobStore(
                files_root=Path(settings.storage_root),
                base_url=settings.storage_base_url,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
