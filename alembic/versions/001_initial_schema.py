"""Initial schema: responses, input_items and output_items tables

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""

from typing import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def _item_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("response_id", sa.String(64), nullable=False),
        sa.Column("item_type", sa.String(64), nullable=False),
        sa.Column("role", sa.String(16), nullable=True),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.Integer(), nullable=False),
    ]


def upgrade() -> None:
    """Create initial tables."""
    op.create_table(
        "responses",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("object", sa.String(32), nullable=False, server_default="response"),
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default="in_progress"),
        sa.Column("model", sa.String(255), nullable=False),
        sa.Column("previous_response_id", sa.String(64), nullable=True),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column("max_output_tokens", sa.Integer(), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column("top_p", sa.Float(), nullable=True),
        sa.Column("store", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("user_id", sa.String(255), nullable=True),
        sa.Column("safety_identifier", sa.String(255), nullable=True),
        sa.Column("prompt_cache_key", sa.String(255), nullable=True),
        sa.Column("usage_input_tokens", sa.Integer(), nullable=True),
        sa.Column("usage_output_tokens", sa.Integer(), nullable=True),
        sa.Column("usage_total_tokens", sa.Integer(), nullable=True),
        sa.Column("error", sa.JSON(), nullable=True),
        sa.Column("incomplete_details", sa.JSON(), nullable=True),
        comment="Stored Responses API turns",
    )
    op.create_index("ix_responses_created_at", "responses", ["created_at"])
    op.create_index("idx_responses_previous_id", "responses", ["previous_response_id"])
    op.create_index("idx_responses_user_id", "responses", ["user_id"])

    op.create_table(
        "input_items",
        *_item_columns(),
        sa.ForeignKeyConstraint(["response_id"], ["responses.id"], ondelete="CASCADE"),
        comment="Items sent to the model for a response",
    )
    op.create_index("ix_input_items_response_id", "input_items", ["response_id"])
    op.create_index("ix_input_items_created_at", "input_items", ["created_at"])

    op.create_table(
        "output_items",
        *_item_columns(),
        sa.Column("status", sa.String(32), nullable=False, server_default="completed"),
        sa.ForeignKeyConstraint(["response_id"], ["responses.id"], ondelete="CASCADE"),
        comment="Items produced by the model for a response",
    )
    op.create_index("ix_output_items_response_id", "output_items", ["response_id"])
    op.create_index("ix_output_items_created_at", "output_items", ["created_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("ix_output_items_created_at", table_name="output_items")
    op.drop_index("ix_output_items_response_id", table_name="output_items")
    op.drop_table("output_items")
    op.drop_index("ix_input_items_created_at", table_name="input_items")
    op.drop_index("ix_input_items_response_id", table_name="input_items")
    op.drop_table("input_items")
    op.drop_index("idx_responses_user_id", table_name="responses")
    op.drop_index("idx_responses_previous_id", table_name="responses")
    op.drop_index("ix_responses_created_at", table_name="responses")
    op.drop_table("responses")
