from letterflow.config.settings import Settings
from letterflow.signing.base import BaseSigner
from letterflow.signing.copy_adapter import CopySigner
from letterflow.signing.pymupdf_adapter import PyMuPdfSigner


class SignerFactory:
    """Creates the configured signer based on settings."""

    ADAPTERS: dict[str, type[BaseSigner]] = {
        "pymupdf": PyMuPdfSigner,
        "copy": CopySigner,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseSigner:
        engine = settings.signing_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown signing engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
