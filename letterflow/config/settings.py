from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "letterflow"
    db_username: str = "letterflow"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    storage_backend: str = "local"
    storage_root: str = "/app/files"
    storage_base_url: str = "/files"

    signing_engine: str = "pymupdf"

    require_reviewer_notes: bool = False
    require_approver_notes: bool = False

    password_hash_iterations: int = 260_000
