import uuid
from typing import Any

from psycopg.rows import dict_row

from letterflow.database.connection import get_connection
from letterflow.database.models import TEMPLATE_COLUMNS
from letterflow.workflow.exceptions import TemplateNotFoundError
from letterflow.workflow.models import Template

_SELECT_COLUMNS = ", ".join(TEMPLATE_COLUMNS)


def _row_to_template(row: dict[str, Any]) -> Template:
    return Template(
        id=str(row["id"]),
        name=row["name"],
        description=row["description"],
        file_ref=row["file_ref"],
    )


class TemplateRepository:
    """Database operations for the templates table."""

    def list_all(self) -> list[Template]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_SELECT_COLUMNS}
                    FROM templates
                    ORDER BY name, id
                    """
                )
                rows = cur.fetchall()
        return [_row_to_template(row) for row in rows]

    def get(self, template_id: str) -> Template:
        """Find a template by ID.

        Raises:
            TemplateNotFoundError: if no template with this ID exists.
        """
        try:
            parsed_id = str(uuid.UUID(str(template_id)))
        except ValueError as exc:
            raise TemplateNotFoundError(template_id) from exc

        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_SELECT_COLUMNS}
                    FROM templates
                    WHERE id = %s::uuid
                    """,
                    (parsed_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise TemplateNotFoundError(template_id)
        return _row_to_template(row)

    def create(self, name: str, file_ref: str, description: str | None = None) -> Template:
        """Insert a template. Used by seeding and administration scripts."""
        template_id = str(uuid.uuid4())
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO templates (id, name, description, file_ref)
                VALUES (%s::uuid, %s, %s, %s)
                """,
                (template_id, name, description, file_ref),
            )
            conn.commit()
        return Template(id=template_id, name=name, description=description, file_ref=file_ref)
