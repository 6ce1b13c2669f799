"""m1_timed_quiz_core_tables

Revision ID: 3c1d2e4f5a60
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "3c1d2e4f5a60"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("question_duration", sa.Integer(), nullable=False),
        sa.Column("expected_words_per_minute", sa.Integer(), nullable=False),
        sa.Column("shuffle_levels", sa.Boolean(), nullable=False),
        sa.Column("shuffle_answers", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("question_duration > 0", name="ck_games_question_duration_positive"),
        sa.CheckConstraint(
            "expected_words_per_minute > 0",
            name="ck_games_expected_words_per_minute_positive",
        ),
    )

    op.create_table(
        "levels",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("bgcolor", sa.String(length=32), nullable=False),
        sa.Column("image", sa.String(length=255), nullable=True),
        sa.Column("state", sa.String(length=16), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("state IN ('ACTIVE','DELETED')", name="ck_levels_state"),
        sa.CheckConstraint("position >= 0", name="ck_levels_position_non_negative"),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"], name="fk_levels_game_id_games"),
    )
    op.create_index("idx_levels_game_state_position", "levels", ["game_id", "state", "position"])

    op.create_table(
        "level_categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("level_id", sa.Integer(), nullable=False),
        sa.Column("bank_category_ref", sa.String(length=64), nullable=False),
        sa.Column("include_subcategories", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(
            ["level_id"],
            ["levels.id"],
            name="fk_level_categories_level_id_levels",
        ),
    )
    op.create_index("idx_level_categories_level", "level_categories", ["level_id"])

    op.create_table(
        "game_sessions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("levels_order", sa.Text(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("answers_total", sa.Integer(), nullable=False),
        sa.Column("answers_correct", sa.Integer(), nullable=False),
        sa.Column("state", sa.String(length=16), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "state IN ('PROGRESS','FINISHED','DUMPED')",
            name="ck_game_sessions_state",
        ),
        sa.CheckConstraint("score >= 0", name="ck_game_sessions_score_non_negative"),
        sa.CheckConstraint(
            "answers_correct >= 0 AND answers_correct <= answers_total",
            name="ck_game_sessions_answers_counters",
        ),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"], name="fk_game_sessions_game_id_games"),
    )
    op.create_index(
        "idx_game_sessions_game_user_updated",
        "game_sessions",
        ["game_id", "user_id", "updated_at"],
    )
    op.create_index(
        "uq_game_sessions_progress_game_user",
        "game_sessions",
        ["game_id", "user_id"],
        unique=True,
        postgresql_where=sa.text("state = 'PROGRESS'"),
    )

    op.create_table(
        "session_questions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("session_id", sa.Uuid(), nullable=False),
        sa.Column("level_id", sa.Integer(), nullable=False),
        sa.Column("bank_question_ref", sa.String(length=64), nullable=False),
        sa.Column("answers_order", sa.Text(), nullable=False),
        sa.Column("given_answer_ref", sa.String(length=64), nullable=True),
        sa.Column("finished", sa.Boolean(), nullable=False),
        sa.Column("correct", sa.Boolean(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("time_remaining", sa.Integer(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("score >= 0", name="ck_session_questions_score_non_negative"),
        sa.CheckConstraint(
            "time_remaining >= 0",
            name="ck_session_questions_time_remaining_non_negative",
        ),
        sa.ForeignKeyConstraint(
            ["session_id"],
            ["game_sessions.id"],
            name="fk_session_questions_session_id_game_sessions",
        ),
        sa.ForeignKeyConstraint(
            ["level_id"],
            ["levels.id"],
            name="fk_session_questions_level_id_levels",
        ),
        sa.UniqueConstraint("session_id", "level_id", name="uq_session_questions_session_level"),
    )


def downgrade() -> None:
    op.drop_table("session_questions")
    op.drop_index("uq_game_sessions_progress_game_user", table_name="game_sessions")
    op.drop_index("idx_game_sessions_game_user_updated", table_name="game_sessions")
    op.drop_table("game_sessions")
    op.drop_index("idx_level_categories_level", table_name="level_categories")
    op.drop_table("level_categories")
    op.drop_index("idx_levels_game_state_position", table_name="levels")
    op.drop_table("levels")
    op.drop_table("games")
