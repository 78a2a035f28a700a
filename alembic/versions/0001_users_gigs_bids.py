"""users, gigs and bids

Revision ID: 0001_users_gigs_bids
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_users_gigs_bids"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("password_hash", sa.String(length=256), nullable=False),
        sa.Column("avatar", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "gigs",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("budget", sa.Numeric(12, 2), nullable=False),
        sa.Column("owner_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(length=16), server_default="open", nullable=False),
        sa.Column("hired_freelancer_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_gigs"),
        sa.ForeignKeyConstraint(
            ["owner_id"], ["users.id"], name="fk_gigs_owner_id_users", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["hired_freelancer_id"], ["users.id"],
            name="fk_gigs_hired_freelancer_id_users", ondelete="SET NULL",
        ),
        sa.CheckConstraint("budget > 0", name="ck_gigs_budget_positive"),
        sa.CheckConstraint("status IN ('open', 'assigned')", name="ck_gigs_status_valid"),
    )
    op.create_index("ix_gigs_owner", "gigs", ["owner_id"])
    op.create_index("ix_gigs_status", "gigs", ["status"])
    op.create_index("ix_gigs_status_created", "gigs", ["status", "created_at"])

    op.create_table(
        "bids",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("gig_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("freelancer_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("proposed_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(length=16), server_default="pending", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_bids"),
        sa.ForeignKeyConstraint(
            ["gig_id"], ["gigs.id"], name="fk_bids_gig_id_gigs", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["freelancer_id"], ["users.id"], name="fk_bids_freelancer_id_users", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("gig_id", "freelancer_id", name="uq_bids_gig_freelancer"),
        sa.CheckConstraint("proposed_price > 0", name="ck_bids_price_positive"),
        sa.CheckConstraint(
            "status IN ('pending', 'hired', 'rejected')", name="ck_bids_status_valid"
        ),
    )
    op.create_index(
        "uq_bids_one_hired_per_gig",
        "bids",
        ["gig_id"],
        unique=True,
        postgresql_where=sa.text("status = 'hired'"),
        sqlite_where=sa.text("status = 'hired'"),
    )
    op.create_index("ix_bids_gig_status", "bids", ["gig_id", "status"])
    op.create_index("ix_bids_freelancer_status", "bids", ["freelancer_id", "status"])
    op.create_index("ix_bids_created", "bids", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_bids_created", table_name="bids")
    op.drop_index("ix_bids_freelancer_status", table_name="bids")
    op.drop_index("ix_bids_gig_status", table_name="bids")
    op.drop_index("uq_bids_one_hired_per_gig", table_name="bids")
    op.drop_table("bids")

    op.drop_index("ix_gigs_status_created", table_name="gigs")
    op.drop_index("ix_gigs_status", table_name="gigs")
    op.drop_index("ix_gigs_owner", table_name="gigs")
    op.drop_table("gigs")

    op.drop_table("users")
