"""initial schema: users, statuses, requests, request history

Revision ID: 7c1e2a9d4b10
Revises:
Create Date: 2026-10-18 09:12:41.318204
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "7c1e2a9d4b10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=256), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=30), nullable=False, server_default="User"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    statuses = op.create_table(
        "request_statuses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("name", sa.String(length=50), nullable=False, unique=True),
        sa.Column("order", sa.Integer(), nullable=False),
    )
    op.bulk_insert(
        statuses,
        [
            {"id": 1, "name": "Open", "order": 1},
            {"id": 2, "name": "InProgress", "order": 2},
            {"id": 3, "name": "Resolved", "order": 3},
            {"id": 4, "name": "Closed", "order": 4},
        ],
    )

    op.create_table(
        "requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "status_id",
            sa.Integer(),
            sa.ForeignKey("request_statuses.id"),
            nullable=False,
            server_default="1",
        ),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("technician_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
    )
    op.create_index("ix_requests_status_id", "requests", ["status_id"])
    op.create_index("ix_requests_created_by_id", "requests", ["created_by_id"])
    op.create_index("ix_requests_technician_id", "requests", ["technician_id"])
    op.create_index("ix_requests_created_at", "requests", ["created_at"])

    op.create_table(
        "request_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("request_id", sa.Integer(), sa.ForeignKey("requests.id"), nullable=False),
        sa.Column("field", sa.String(length=100), nullable=False),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=False),
        sa.Column("changed_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_request_history_request_id", "request_history", ["request_id"])


def downgrade():
    op.drop_table("request_history")
    op.drop_table("requests")
    op.drop_table("request_statuses")
    op.drop_table("users")
