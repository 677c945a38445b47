"""create daos, members, proposals, votes, activity

Revision ID: 4c1e9a7d2b10
Revises:
Create Date: 2026-10-17 09:12:44.318027

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "4c1e9a7d2b10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "daos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("creator", sa.String(length=255), nullable=False),
        sa.Column("creator_name", sa.String(length=255), nullable=True),
        sa.Column("approval_threshold", sa.Integer(), nullable=False, server_default=sa.text("51")),
        sa.Column("spend_limit_sats", sa.BigInteger(), nullable=True, server_default=sa.text("0")),
        sa.Column("treasury_sats", sa.BigInteger(), nullable=False, server_default=sa.text("0")),
        sa.Column("member_count", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("proposal_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.String(length=32), nullable=False, server_default=sa.text("'active'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("name", name="uq_daos_name"),
        sa.CheckConstraint("approval_threshold BETWEEN 1 AND 100", name="ck_daos_threshold_range"),
        sa.CheckConstraint("treasury_sats >= 0", name="ck_daos_treasury_non_negative"),
    )

    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("dao_id", sa.Integer(), nullable=False),
        sa.Column("btc_address", sa.String(length=255), nullable=False),
        sa.Column("stx_address", sa.String(length=255), nullable=True),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="member"),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["dao_id"], ["daos.id"], name="fk_members_dao", ondelete="CASCADE"),
        sa.UniqueConstraint("dao_id", "btc_address", name="uq_members_dao_address"),
    )
    op.create_index("ix_members_dao_id", "members", ["dao_id"])
    op.create_index("ix_members_btc_address", "members", ["btc_address"])

    op.create_table(
        "proposals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("dao_id", sa.Integer(), nullable=False),
        sa.Column("proposer", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("action_type", sa.String(length=32), nullable=False, server_default=sa.text("'general'")),
        sa.Column("amount_sats", sa.BigInteger(), nullable=True, server_default=sa.text("0")),
        sa.Column("recipient", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default=sa.text("'active'")),
        sa.Column("votes_for", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("votes_against", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("executed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["dao_id"], ["daos.id"], name="fk_proposals_dao", ondelete="CASCADE"),
        sa.CheckConstraint("votes_for >= 0 AND votes_against >= 0", name="ck_proposals_votes_non_negative"),
    )
    op.create_index("ix_proposals_dao_id", "proposals", ["dao_id"])
    op.create_index("ix_proposals_status", "proposals", ["status"])

    op.create_table(
        "votes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("proposal_id", sa.Integer(), nullable=False),
        sa.Column("dao_id", sa.Integer(), nullable=False),
        sa.Column("voter", sa.String(length=255), nullable=False),
        sa.Column("vote", sa.String(length=8), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["proposal_id"], ["proposals.id"], name="fk_votes_proposal", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["dao_id"], ["daos.id"], name="fk_votes_dao", ondelete="CASCADE"),
        sa.UniqueConstraint("proposal_id", "voter", name="uq_votes_proposal_voter"),
        sa.CheckConstraint("vote IN ('yes','no')", name="ck_votes_vote_valid"),
    )
    op.create_index("ix_votes_proposal_id", "votes", ["proposal_id"])

    op.create_table(
        "activity",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("dao_id", sa.Integer(), nullable=False),
        sa.Column("actor", sa.String(length=255), nullable=False),
        sa.Column("action", sa.String(length=32), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["dao_id"], ["daos.id"], name="fk_activity_dao", ondelete="CASCADE"),
    )
    op.create_index("ix_activity_dao_id", "activity", ["dao_id"])


def downgrade():
    op.drop_index("ix_activity_dao_id", table_name="activity")
    op.drop_table("activity")
    op.drop_index("ix_votes_proposal_id", table_name="votes")
    op.drop_table("votes")
    op.drop_index("ix_proposals_status", table_name="proposals")
    op.drop_index("ix_proposals_dao_id", table_name="proposals")
    op.drop_table("proposals")
    op.drop_index("ix_members_btc_address", table_name="members")
    op.drop_index("ix_members_dao_id", table_name="members")
    op.drop_table("members")
    op.drop_table("daos")
