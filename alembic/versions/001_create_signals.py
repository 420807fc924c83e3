"""Create signals table.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "signals",
        sa.Column("id", postgresql.UUID, primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("status", sa.String(20)),
        sa.Column("room_id", sa.String(255)),
        sa.Column("sender_id", sa.String(255)),
        sa.Column("kind", sa.String(30)),
        sa.Column("payload", postgresql.JSONB, server_default="{}"),
        sa.CheckConstraint("status IS NULL OR status IN ('active', 'processed')", name="ck_signals_status"),
    )
    op.create_index("ix_signals_created_at", "signals", ["created_at"])
    op.create_index("ix_signals_status_created_at", "signals", ["status", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_signals_status_created_at", table_name="signals")
    op.drop_index("ix_signals_created_at", table_name="signals")
    op.drop_table("signals")
