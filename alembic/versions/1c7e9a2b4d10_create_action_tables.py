"""create agents, users, messages, wallets, external_wallets, emails

Revision ID: 1c7e9a2b4d10
Revises:
Create Date: 2026-10-18 09:12:44.301552

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '1c7e9a2b4d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "agents",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("created_by_ref", sa.String(length=128), nullable=True),
        sa.Column("is_locked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "users",
        sa.Column("ref", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=256), nullable=True),
    )

    op.create_table(
        "messages",
        sa.Column("seq", sa.BigInteger(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column("room_id", sa.String(length=64), nullable=False),
        sa.Column("agent_id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column("direction", sa.String(length=16), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("source", sa.String(length=64), nullable=True),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_messages_room_seq", "messages", ["room_id", "seq"])
    op.create_index("idx_messages_room_created", "messages", ["room_id", "created_at"])

    op.create_table(
        "wallets",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "agent_id",
            sa.String(length=64),
            sa.ForeignKey("agents.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("public_key", sa.String(length=128), nullable=False),
        sa.Column("tx_hash", sa.String(length=128), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "external_wallets",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "agent_id",
            sa.String(length=64),
            sa.ForeignKey("agents.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("public_key", sa.String(length=128), nullable=False),
        sa.Column("zk_proof_hash", sa.String(length=256), nullable=False),
        sa.Column("runes_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "emails",
        sa.Column("id", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column(
            "agent_id",
            sa.String(length=64),
            sa.ForeignKey("agents.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("from_address", sa.String(length=256), nullable=False),
        sa.Column("from_name", sa.String(length=256), nullable=True),
        sa.Column("subject", sa.String(length=512), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_emails_agent_id", "emails", ["agent_id"])


def downgrade() -> None:
    op.drop_index("ix_emails_agent_id", table_name="emails")
    op.drop_table("emails")
    op.drop_table("external_wallets")
    op.drop_table("wallets")
    op.drop_index("idx_messages_room_created", table_name="messages")
    op.drop_index("idx_messages_room_seq", table_name="messages")
    op.drop_table("messages")
    op.drop_table("users")
    op.drop_table("agents")
