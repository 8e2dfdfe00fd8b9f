"""Change feed triggers — pg_notify on every write to the stats-relevant tables.

Revision ID: 002_change_feed_triggers
Revises: 001_initial
Create Date: 2026-10-18

Live stats subscribers LISTEN on `twincord_changes`. Any INSERT/UPDATE/DELETE
on these tables notifies with the table name as payload. No-op on non-PostgreSQL
databases, where subscribers run on timers only.
"""
from typing import Sequence, Union

from alembic import op

revision: str = "002_change_feed_triggers"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CHANNEL = "twincord_changes"
TABLES = ("users", "communities", "community_members", "community_messages")


def _is_postgres() -> bool:
    return op.get_bind().dialect.name == "postgresql"


def upgrade() -> None:
    if not _is_postgres():
        return
    op.execute(f"""
        CREATE OR REPLACE FUNCTION twincord_notify_change() RETURNS trigger AS $$
        BEGIN
            PERFORM pg_notify('{CHANNEL}', TG_TABLE_NAME);
            RETURN NULL;
        END;
        $$ LANGUAGE plpgsql;
    """)
    for table in TABLES:
        op.execute(f"""
            CREATE TRIGGER {table}_notify_change
            AFTER INSERT OR UPDATE OR DELETE ON {table}
            FOR EACH STATEMENT EXECUTE FUNCTION twincord_notify_change();
        """)


def downgrade() -> None:
    if not _is_postgres():
        return
    for table in TABLES:
        op.execute(f"DROP TRIGGER IF EXISTS {table}_notify_change ON {table};")
    op.execute("DROP FUNCTION IF EXISTS twincord_notify_change();")
