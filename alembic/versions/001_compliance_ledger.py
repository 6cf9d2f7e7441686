"""Compliance ledger tables.

Revision ID: 001_compliance_ledger
Revises:
Create Date: 2026-10-19

Creates routes, ship_compliance, bank_entries, pools and pool_members.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "001_compliance_ledger"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "routes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("route_id", sa.String(100), nullable=False),
        sa.Column("vessel_type", sa.String(100), nullable=False, server_default=""),
        sa.Column("fuel_type", sa.String(50), nullable=False, server_default=""),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("ghg_intensity", sa.Float(), nullable=False),
        sa.Column("fuel_consumption", sa.Float(), nullable=False),
        sa.Column("distance", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_emissions", sa.Float(), nullable=False, server_default="0"),
        sa.Column("is_baseline", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_routes_route_id", "routes", ["route_id"], unique=True)
    op.create_index("ix_routes_year", "routes", ["year"])

    op.create_table(
        "ship_compliance",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("ship_id", sa.String(100), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("cb_gco2eq", sa.Float(), nullable=False),
        sa.Column("energy_mj", sa.Float(), nullable=False),
        sa.Column("actual_intensity", sa.Float(), nullable=False),
        sa.Column("target_intensity", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("ship_id", "year", name="uq_ship_compliance_ship_year"),
    )

    op.create_table(
        "bank_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("ship_id", sa.String(100), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("amount_gco2eq", sa.Float(), nullable=False),
        sa.Column("applied", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("applied_year", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_bank_entries_ship_applied", "bank_entries", ["ship_id", "applied"])

    op.create_table(
        "pools",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("total_cb", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_pools_year", "pools", ["year"])

    op.create_table(
        "pool_members",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "pool_id", postgresql.UUID(as_uuid=True),
            sa.ForeignKey("pools.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("ship_id", sa.String(100), nullable=False),
        sa.Column("cb_before", sa.Float(), nullable=False),
        sa.Column("cb_after", sa.Float(), nullable=False),
    )
    op.create_index("ix_pool_members_pool_id", "pool_members", ["pool_id"])


def downgrade() -> None:
    op.drop_index("ix_pool_members_pool_id", table_name="pool_members")
    op.drop_table("pool_members")
    op.drop_index("ix_pools_year", table_name="pools")
    op.drop_table("pools")
    op.drop_index("ix_bank_entries_ship_applied", table_name="bank_entries")
    op.drop_table("bank_entries")
    op.drop_table("ship_compliance")
    op.drop_index("ix_routes_year", table_name="routes")
    op.drop_index("ix_routes_route_id", table_name="routes")
    op.drop_table("routes")
