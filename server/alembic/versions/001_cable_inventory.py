"""create catalog, inventory ledger, import history and datacenter tables

Revision ID: 001_cable_inventory
Revises:
Create Date: 2026-10-19

This migration adds:
1. products: one row per MSF part number
2. inventory_ledger: append-only quantity snapshots per (msf, datacenter)
3. import_history: audit trail of completed imports
4. datacenters: registry of named sites
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001_cable_inventory"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("msf", sa.String(100), nullable=False),
        sa.Column("item_name", sa.Text(), nullable=False),
        sa.Column("item_group", sa.String(100), nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("cable_type", sa.String(20), nullable=True),
        sa.Column("cable_length", sa.String(20), nullable=True),
        sa.Column("cable_length_value", sa.Float(), nullable=True),
        sa.Column("cable_length_unit", sa.String(4), nullable=True),
        sa.Column("speed", sa.String(10), nullable=True),
        sa.Column("connector_type", sa.String(20), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("datacenter", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("msf", name="pk_products"),
    )
    op.create_index("ix_products_item_group", "products", ["item_group"])
    op.create_index("ix_products_category", "products", ["category"])
    op.create_index("ix_products_cable_type", "products", ["cable_type"])

    op.create_table(
        "inventory_ledger",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("msf", sa.String(100), nullable=False),
        sa.Column("datacenter", sa.String(100), server_default="", nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("import_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("source_file", sa.String(500), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_inventory_ledger"),
        sa.ForeignKeyConstraint(
            ["msf"], ["products.msf"],
            name="fk_inventory_ledger_msf_products",
        ),
        sa.CheckConstraint(
            "quantity >= 0",
            name="ck_inventory_ledger_quantity_non_negative",
        ),
    )
    # Serves "latest ledger row per (msf, datacenter)"
    op.create_index(
        "ix_inventory_ledger_msf_datacenter_ts",
        "inventory_ledger",
        ["msf", "datacenter", "import_timestamp", "id"],
    )
    op.create_index("ix_inventory_ledger_datacenter", "inventory_ledger", ["datacenter"])

    op.create_table(
        "import_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("filename", sa.String(500), nullable=False),
        sa.Column("datacenter", sa.String(100), server_default="", nullable=False),
        sa.Column("import_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("records_processed", sa.Integer(), nullable=False),
        sa.Column("new_products", sa.Integer(), nullable=False),
        sa.Column("updated_products", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_import_history"),
    )
    op.create_index("ix_import_history_import_date", "import_history", ["import_date"])

    op.create_table(
        "datacenters",
        sa.Column("id", sa.String(100), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_datacenters"),
    )


def downgrade() -> None:
    op.drop_table("datacenters")
    op.drop_index("ix_import_history_import_date", table_name="import_history")
    op.drop_table("import_history")
    op.drop_index("ix_inventory_ledger_datacenter", table_name="inventory_ledger")
    op.drop_index("ix_inventory_ledger_msf_datacenter_ts", table_name="inventory_ledger")
    op.drop_table("inventory_ledger")
    op.drop_index("ix_products_cable_type", table_name="products")
    op.drop_index("ix_products_category", table_name="products")
    op.drop_index("ix_products_item_group", table_name="products")
    op.drop_table("products")
