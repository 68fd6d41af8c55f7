"""quiz_games_initial_schema

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "1a2b3c4d5e6f"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("is_superuser", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )
    op.create_index("idx_users_created_at", "users", ["created_at"])

    op.create_table(
        "categories",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("parent_id", sa.BigInteger(), nullable=True),
        sa.ForeignKeyConstraint(["parent_id"], ["categories.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_categories_parent_name", "categories", ["parent_id", "name"])

    op.create_table(
        "questions",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("category_id", sa.BigInteger(), nullable=False),
        sa.Column("questiontext", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_questions_category", "questions", ["category_id"])
    op.create_index("idx_questions_user", "questions", ["user_id"])

    op.create_table(
        "quizzes",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )
    op.create_index("idx_quizzes_user", "quizzes", ["user_id"])

    op.create_table(
        "quiz_questions",
        sa.Column("quiz_id", sa.BigInteger(), nullable=False),
        sa.Column("question_id", sa.BigInteger(), nullable=False),
        sa.Column("weight", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.CheckConstraint("weight > 0", name="ck_quiz_questions_weight_positive"),
        sa.ForeignKeyConstraint(["quiz_id"], ["quizzes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("quiz_id", "question_id"),
    )
    op.create_index("idx_quiz_questions_question", "quiz_questions", ["question_id"])

    op.create_table(
        "game_sessions",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("quiz_id", sa.BigInteger(), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("duration_seconds", sa.Integer(), nullable=False),
        sa.Column("starttime", sa.DateTime(timezone=True), nullable=True),
        sa.Column("endtime", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("duration_seconds > 0", name="ck_game_sessions_duration_positive"),
        sa.CheckConstraint(
            "endtime IS NULL OR starttime IS NOT NULL",
            name="ck_game_sessions_endtime_requires_starttime",
        ),
        sa.ForeignKeyConstraint(["quiz_id"], ["quizzes.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_game_sessions_quiz", "game_sessions", ["quiz_id"])
    op.create_index("idx_game_sessions_starttime_endtime", "game_sessions", ["starttime", "endtime"])

    op.create_table(
        "game_members",
        sa.Column("gamesession_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["gamesession_id"], ["game_sessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("gamesession_id", "user_id"),
    )
    op.create_index("idx_game_members_user", "game_members", ["user_id"])

    op.create_table(
        "question_performances",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("gamesession_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("question_id", sa.BigInteger(), nullable=False),
        sa.Column("question_correct", sa.SmallInteger(), nullable=False),
        sa.Column("answered_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "question_correct IN (0, 100)",
            name="ck_question_performances_correct_range",
        ),
        sa.ForeignKeyConstraint(["gamesession_id"], ["game_sessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "gamesession_id",
            "user_id",
            "question_id",
            name="uq_question_performances_game_user_question",
        ),
    )
    op.create_index(
        "idx_question_performances_user_correct",
        "question_performances",
        ["user_id", "question_correct"],
    )
    op.create_index(
        "idx_question_performances_game_answered",
        "question_performances",
        ["gamesession_id", "answered_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_question_performances_game_answered", table_name="question_performances")
    op.drop_index("idx_question_performances_user_correct", table_name="question_performances")
    op.drop_table("question_performances")
    op.drop_index("idx_game_members_user", table_name="game_members")
    op.drop_table("game_members")
    op.drop_index("idx_game_sessions_starttime_endtime", table_name="game_sessions")
    op.drop_index("idx_game_sessions_quiz", table_name="game_sessions")
    op.drop_table("game_sessions")
    op.drop_index("idx_quiz_questions_question", table_name="quiz_questions")
    op.drop_table("quiz_questions")
    op.drop_index("idx_quizzes_user", table_name="quizzes")
    op.drop_table("quizzes")
    op.drop_index("idx_questions_user", table_name="questions")
    op.drop_index("idx_questions_category", table_name="questions")
    op.drop_table("questions")
    op.drop_index("idx_categories_parent_name", table_name="categories")
    op.drop_table("categories")
    op.drop_index("idx_users_created_at", table_name="users")
    op.drop_table("users")
