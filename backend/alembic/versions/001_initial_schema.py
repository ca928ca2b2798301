"""Initial schema — user_profiles, game_sessions, badges, user_badges.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("account_id", sa.String(64), nullable=True),
        sa.Column("name", sa.String(200), nullable=False, server_default=""),
        sa.Column("age_group", sa.String(20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "game_sessions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("scenario_id", sa.String(64), nullable=False),
        sa.Column("account_id", sa.String(64), nullable=False),
        sa.Column("profile_id", sa.String(64), nullable=False),
        sa.Column("player_names", sa.JSON, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="in_progress"),
        sa.Column("current_scene_id", sa.String(128), nullable=False, server_default=""),
        sa.Column("choice_history", sa.JSON, nullable=False),
        sa.Column("compass_values", sa.JSON, nullable=False),
        sa.Column("target_age_group", sa.String(20), nullable=False, server_default="6-9"),
        sa.Column("is_paused", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("elapsed_seconds", sa.Float, nullable=False, server_default="0"),
        sa.Column("version", sa.Integer, nullable=False, server_default="0"),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("paused_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_game_sessions_profile_id", "game_sessions", ["profile_id"])

    op.create_table(
        "badges",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("age_group_id", sa.String(20), nullable=False),
        sa.Column("axis", sa.String(64), nullable=False),
        sa.Column("tier", sa.String(32), nullable=False),
        sa.Column("tier_order", sa.Integer, nullable=False),
        sa.Column("required_score", sa.Float, nullable=False),
        sa.Column("title", sa.String(200), nullable=False, server_default=""),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("image_id", sa.String(128), nullable=True),
    )
    op.create_index("ix_badges_age_group_axis", "badges", ["age_group_id", "axis"])

    op.create_table(
        "user_badges",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("profile_id", sa.String(64), nullable=False),
        sa.Column("badge_id", sa.String(64), sa.ForeignKey("badges.id"), nullable=False),
        sa.Column("source_session_id", sa.String(64), sa.ForeignKey("game_sessions.id"), nullable=False),
        sa.Column("axis", sa.String(64), nullable=False, server_default=""),
        sa.Column("trigger_value", sa.Float, nullable=False, server_default="0"),
        sa.Column("threshold", sa.Float, nullable=False, server_default="0"),
        sa.Column("awarded_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("profile_id", "badge_id", name="uq_user_badges_profile_badge"),
    )
    op.create_index("ix_user_badges_profile_id", "user_badges", ["profile_id"])


def downgrade() -> None:
    op.drop_index("ix_user_badges_profile_id", table_name="user_badges")
    op.drop_table("user_badges")
    op.drop_index("ix_badges_age_group_axis", table_name="badges")
    op.drop_table("badges")
    op.drop_index("ix_game_sessions_profile_id", table_name="game_sessions")
    op.drop_table("game_sessions")
    op.drop_table("user_profiles")
