from letterflow.config.settings import Settings
from letterflow.database.connection import close_pool, get_connection, init_pool
from letterflow.database.schema import apply_schema
from letterflow.logging.logger import Log
from letterflow.service.workflow_service import build_service


def main() -> None:
    """Entry point: initialize pool -> apply schema -> build service and report."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        with get_connection() as conn:
            apply_schema(conn)
        Log.info("Database schema is up to date")
        service = build_service(settings)
        templates = service.list_templates()
        Log.info(f"letterflow ready ({settings.app_env}): {len(templates)} templates available")
    finally:
        close_pool()


if __name__ == "__main__":
    main()
