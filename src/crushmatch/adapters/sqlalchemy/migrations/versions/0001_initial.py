"""Create member, store_state and analytics_report tables; seed the version row.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from crushmatch.adapters.sqlalchemy.mappings import MatchListType, StringListType, UTCDateTime

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "member",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("identity_name", sa.String(), nullable=False),
        sa.Column("contact", sa.String(), nullable=False),
        sa.Column("crushes", StringListType(), nullable=False),
        sa.Column("locked_crushes", StringListType(), nullable=False),
        sa.Column("matches", MatchListType(), nullable=False),
        sa.Column("crush_count", sa.Integer(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=True),
        sa.Column("updated_at", UTCDateTime(), nullable=True),
        sa.Column("last_login", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_member")),
    )
    store_state = op.create_table(
        "store_state",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("data_version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_store_state")),
    )
    op.bulk_insert(store_state, [{"id": 1, "data_version": 0}])
    op.create_table(
        "analytics_report",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("total_members", sa.Integer(), nullable=False),
        sa.Column("verified_members", sa.Integer(), nullable=False),
        sa.Column("total_matches", sa.Integer(), nullable=False),
        sa.Column("matched_pairs", StringListType(), nullable=False),
        sa.Column("total_crushes", sa.Integer(), nullable=False),
        sa.Column("orphan_crushes", sa.Integer(), nullable=False),
        sa.Column("people_with_crushes", sa.Integer(), nullable=False),
        sa.Column("avg_crushes", sa.Float(), nullable=False),
        sa.Column("active_members_pct", sa.Float(), nullable=False),
        sa.Column("manual", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_analytics_report")),
    )
    op.create_index(
        op.f("ix_analytics_report_created_at"), "analytics_report", ["created_at"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_analytics_report_created_at"), table_name="analytics_report")
    op.drop_table("analytics_report")
    op.drop_table("store_state")
    op.drop_table("member")
