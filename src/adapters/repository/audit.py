"""PostgreSQL audit log adapter - Implements AuditLog protocol."""

import logging
import uuid

from psycopg import Connection

from src.domain.ports import Account, AuditEventType

logger = logging.getLogger(__name__)


class PostgresAuditLog:
    """
    Implements AuditLog protocol via psycopg3.

    Writes on the caller's connection, so the audit row commits or rolls
    back with the change it describes.
    """

    def record(
        self, conn: Connection, entity: Account, event_type: AuditEventType, actor_id: str
    ) -> None:
        conn.execute(
            """
            INSERT INTO audit_log (id, entity_id, entity_class, event_type, message, actor_id)
            VALUES (%s, %s, %s, %s, %s, %s)
            """,
            (
                str(uuid.uuid4()),
                entity.id,
                type(entity).__name__,
                event_type.value,
                entity.username,
                actor_id,
            ),
        )
        logger.debug(
            "Audit %s %s %s by %s", event_type.value, type(entity).__name__, entity.id, actor_id
        )
