"""Initial migration: create competition, team, bracketmatch tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "competition",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("format", sa.String(), nullable=False),
        sa.Column("subdivisions", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "team",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("subdivision", sa.String(), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("played", sa.Integer(), nullable=False),
        sa.Column("wins", sa.Integer(), nullable=False),
        sa.Column("draws", sa.Integer(), nullable=False),
        sa.Column("losses", sa.Integer(), nullable=False),
        sa.Column("goals_for", sa.Integer(), nullable=False),
        sa.Column("goals_against", sa.Integer(), nullable=False),
        sa.Column("goal_difference", sa.Integer(), nullable=True),
        sa.Column("eliminated", sa.Boolean(), nullable=True),
        sa.Column("knockout_seed", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["competition_id"], ["competition.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("competition_id", "name", name="uq_competition_team_name"),
    )
    op.create_index(op.f("ix_team_competition_id"), "team", ["competition_id"], unique=False)
    op.create_index(op.f("ix_team_subdivision"), "team", ["subdivision"], unique=False)

    op.create_table(
        "bracketmatch",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=False),
        sa.Column("round", sa.String(), nullable=False),
        sa.Column("match_number", sa.Integer(), nullable=False),
        sa.Column("home_team_id", sa.Integer(), nullable=True),
        sa.Column("home_team_name", sa.String(), nullable=True),
        sa.Column("away_team_id", sa.Integer(), nullable=True),
        sa.Column("away_team_name", sa.String(), nullable=True),
        sa.Column("home_score", sa.Integer(), nullable=True),
        sa.Column("away_score", sa.Integer(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("winner_id", sa.Integer(), nullable=True),
        sa.Column("winner_name", sa.String(), nullable=True),
        sa.Column("next_match_number", sa.Integer(), nullable=True),
        sa.Column("slot_in_next_match", sa.String(), nullable=True),
        sa.Column("external_event_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["competition_id"], ["competition.id"]),
        sa.ForeignKeyConstraint(["home_team_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["away_team_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["winner_id"], ["team.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("competition_id", "round", "match_number", name="uq_bracket_round_match"),
    )
    op.create_index(op.f("ix_bracketmatch_competition_id"), "bracketmatch", ["competition_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_bracketmatch_competition_id"), table_name="bracketmatch")
    op.drop_table("bracketmatch")
    op.drop_index(op.f("ix_team_subdivision"), table_name="team")
    op.drop_index(op.f("ix_team_competition_id"), table_name="team")
    op.drop_table("team")
    op.drop_table("competition")
