"""Create supplies, crew, inventory and logs tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "supplies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("strength_or_volume", sa.String(), nullable=True),
        sa.Column("route_of_use", sa.String(), nullable=True),
        sa.Column("quantity_in_pack", sa.Integer(), nullable=True),
        sa.Column("possible_side_effects", sa.Text(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_supplies_name", "supplies", ["name"])

    op.create_table(
        "crew",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password", sa.String(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_crew_email", "crew", ["email"], unique=True)

    op.create_table(
        "inventory",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("supply_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("expiry_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(["supply_id"], ["supplies.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["crew.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_inventory_supply_id", "inventory", ["supply_id"])
    op.create_index("ix_inventory_user_id", "inventory", ["user_id"])
    op.create_index("ix_inventory_expiry_date", "inventory", ["expiry_date"])

    op.create_table(
        "logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("inventory_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["inventory_id"], ["inventory.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["crew.id"]),
    )
    op.create_index("ix_logs_inventory_id", "logs", ["inventory_id"])
    op.create_index("ix_logs_user_id", "logs", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_logs_user_id", table_name="logs")
    op.drop_index("ix_logs_inventory_id", table_name="logs")
    op.drop_table("logs")
    op.drop_index("ix_inventory_expiry_date", table_name="inventory")
    op.drop_index("ix_inventory_user_id", table_name="inventory")
    op.drop_index("ix_inventory_supply_id", table_name="inventory")
    op.drop_table("inventory")
    op.drop_index("ix_crew_email", table_name="crew")
    op.drop_table("crew")
    op.drop_index("ix_supplies_name", table_name="supplies")
    op.drop_table("supplies")
