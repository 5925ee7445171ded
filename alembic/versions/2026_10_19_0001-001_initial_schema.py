"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

All 8 tables as defined in studysync/models/database_models.py:
users, notes, flashcards, todos, projects, schedules, study_sessions, news_feeds.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(with_updated: bool = True):
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)]
    if with_updated:
        cols.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
        )
    return cols


def _owner():
    return sa.Column(
        "user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("username", sa.String(255), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("first_name", sa.String(255), nullable=True),
        sa.Column("last_name", sa.String(255), nullable=True),
        sa.Column("profile_image", sa.Text, nullable=True),
        *_timestamps(),
    )

    # ── notes ─────────────────────────────────────────────────────────────
    op.create_table(
        "notes",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        _owner(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("tags", sa.JSON, nullable=True),
        *_timestamps(),
    )

    # ── flashcards ────────────────────────────────────────────────────────
    op.create_table(
        "flashcards",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        _owner(),
        sa.Column("deck_name", sa.Text, nullable=False),
        sa.Column("cards", sa.JSON, nullable=False),
        *_timestamps(),
    )

    # ── todos ─────────────────────────────────────────────────────────────
    op.create_table(
        "todos",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        _owner(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("completed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    # ── projects ──────────────────────────────────────────────────────────
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        _owner(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="in_progress"),
        sa.Column("data", sa.JSON, nullable=False),
        *_timestamps(),
    )

    # ── schedules ─────────────────────────────────────────────────────────
    op.create_table(
        "schedules",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        _owner(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.Text, nullable=True),
        sa.Column("type", sa.String(20), nullable=False),
        *_timestamps(with_updated=False),
    )

    # ── study_sessions ────────────────────────────────────────────────────
    op.create_table(
        "study_sessions",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        _owner(),
        sa.Column("duration", sa.Integer, nullable=False),
        sa.Column("subject", sa.Text, nullable=True),
        sa.Column("type", sa.String(20), nullable=False, server_default="pomodoro"),
        *_timestamps(with_updated=False),
    )

    # ── news_feeds ───────────────────────────────────────────────────────
    op.create_table(
        "news_feeds",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        _owner(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("image_url", sa.Text, nullable=True),
        sa.Column("likes", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(with_updated=False),
    )


def downgrade() -> None:
    for table in (
        "news_feeds",
        "study_sessions",
        "schedules",
        "projects",
        "todos",
        "flashcards",
        "notes",
        "users",
    ):
        op.drop_table(table)
