"""create users, deals and claims

Revision ID: 0001_create_core_tables
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


revision = "0001_create_core_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("company", sa.String(length=100), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("avatar", sa.String(length=500), nullable=True),
        sa.Column("bio", sa.String(length=500), nullable=True),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_is_verified"), "users", ["is_verified"])

    op.create_table(
        "deals",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=1000), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("partner_name", sa.String(length=255), nullable=False),
        sa.Column("partner_logo", sa.String(length=500), nullable=True),
        sa.Column("partner_website", sa.String(length=500), nullable=True),
        sa.Column("partner_description", sa.String(length=500), nullable=True),
        sa.Column("discount_type", sa.String(length=32), nullable=False),
        sa.Column("discount_value", sa.String(length=100), nullable=False),
        sa.Column("discount_original_price", sa.String(length=100), nullable=True),
        sa.Column("is_locked", sa.Boolean(), nullable=False),
        sa.Column("eligibility_requirements", sa.String(length=500), nullable=False),
        sa.Column("features", sa.JSON(), nullable=True),
        sa.Column("terms", sa.String(length=1000), nullable=True),
        sa.Column("valid_until", sa.DateTime(), nullable=True),
        sa.Column("claim_count", sa.Integer(), nullable=False),
        sa.Column("max_claims", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("featured", sa.Boolean(), nullable=False),
        sa.Column("cover_image", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("claim_count >= 0", name="ck_deals_claim_count_ge_0"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_deals_category"), "deals", ["category"])
    op.create_index(op.f("ix_deals_is_locked"), "deals", ["is_locked"])
    op.create_index(op.f("ix_deals_is_active"), "deals", ["is_active"])
    op.create_index(op.f("ix_deals_claim_count"), "deals", ["claim_count"])

    op.create_table(
        "claims",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("deal_id", sa.String(length=36), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("redemption_code", sa.String(length=32), nullable=True),
        sa.Column("redemption_instructions", sa.String(length=1000), nullable=True),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("claimed_at", sa.DateTime(), nullable=False),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("used_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["deal_id"], ["deals.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "deal_id", name="uq_claims_user_deal"),
    )
    op.create_index("ix_claims_user_status", "claims", ["user_id", "status"])
    op.create_index("ix_claims_deal_status", "claims", ["deal_id", "status"])


def downgrade() -> None:
    op.drop_index("ix_claims_deal_status", table_name="claims")
    op.drop_index("ix_claims_user_status", table_name="claims")
    op.drop_table("claims")
    op.drop_index(op.f("ix_deals_claim_count"), table_name="deals")
    op.drop_index(op.f("ix_deals_is_active"), table_name="deals")
    op.drop_index(op.f("ix_deals_is_locked"), table_name="deals")
    op.drop_index(op.f("ix_deals_category"), table_name="deals")
    op.drop_table("deals")
    op.drop_index(op.f("ix_users_is_verified"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
