"""Create rental core tables

Revision ID: 20260301_000001
Revises:
Create Date: 2026-03-01

Tenants, staff users, fleet, clients, contracts, inspections, invoices,
hash-chained payments, maintenance records and the audit log.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20260301_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


PAYMENT_METHODS = ("cash_departure", "cash_return", "invoice", "card")


def _id():
    return sa.Column("id", sa.Uuid(), nullable=False)


def _tenant_id():
    return sa.Column("tenant_id", sa.Uuid(), sa.ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "tenants",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tenants_slug", "tenants", ["slug"], unique=True)

    op.create_table(
        "users",
        _id(),
        _tenant_id(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_tenant_id", "users", ["tenant_id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "vehicle_categories",
        _id(),
        _tenant_id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("daily_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_vehicle_categories_tenant_id", "vehicle_categories", ["tenant_id"])

    op.create_table(
        "vehicles",
        _id(),
        _tenant_id(),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("vehicle_categories.id"), nullable=True),
        sa.Column("brand", sa.String(100), nullable=False),
        sa.Column("model", sa.String(100), nullable=False),
        sa.Column("plate_number", sa.String(20), nullable=False),
        sa.Column("mileage", sa.Integer(), nullable=False),
        sa.Column("daily_rate_override", sa.Numeric(10, 2), nullable=True),
        sa.Column(
            "status",
            sa.Enum("available", "rented", "maintenance", "out_of_service", name="vehicle_status"),
            nullable=False,
        ),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_vehicles_tenant_id", "vehicles", ["tenant_id"])
    op.create_index("ix_vehicles_status", "vehicles", ["status"])

    op.create_table(
        "clients",
        _id(),
        _tenant_id(),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("is_trusted", sa.Boolean(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_clients_tenant_id", "clients", ["tenant_id"])

    op.create_table(
        "rental_options",
        _id(),
        _tenant_id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("daily_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_per_day", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rental_options_tenant_id", "rental_options", ["tenant_id"])

    op.create_table(
        "rental_contracts",
        _id(),
        _tenant_id(),
        sa.Column("contract_number", sa.String(20), nullable=False),
        sa.Column("client_id", sa.Uuid(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("vehicle_id", sa.Uuid(), sa.ForeignKey("vehicles.id"), nullable=False),
        sa.Column("created_by_user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "draft", "approved", "pending_cg", "active", "completed", "cancelled",
                name="contract_status",
            ),
            nullable=False,
        ),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("actual_return_date", sa.DateTime(), nullable=True),
        sa.Column("daily_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_days", sa.Integer(), nullable=False),
        sa.Column("base_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("options_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("adjustment_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("excess_km_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("damages_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("deposit_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("included_km_per_day", sa.Integer(), nullable=True),
        sa.Column("excess_km_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("departure_mileage", sa.Integer(), nullable=True),
        sa.Column("return_mileage", sa.Integer(), nullable=True),
        sa.Column("terms_accepted", sa.Boolean(), nullable=False),
        sa.Column("payment_method", sa.Enum(*PAYMENT_METHODS, name="contract_payment_method"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "contract_number", name="uq_rental_contracts_tenant_contract_number"),
    )
    op.create_index("ix_rental_contracts_tenant_id", "rental_contracts", ["tenant_id"])
    op.create_index("ix_rental_contracts_contract_number", "rental_contracts", ["contract_number"])
    op.create_index("ix_rental_contracts_client_id", "rental_contracts", ["client_id"])
    op.create_index("ix_rental_contracts_vehicle_id", "rental_contracts", ["vehicle_id"])
    op.create_index("ix_rental_contracts_status", "rental_contracts", ["status"])

    op.create_table(
        "contract_options",
        _id(),
        sa.Column(
            "contract_id", sa.Uuid(),
            sa.ForeignKey("rental_contracts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("rental_option_id", sa.Uuid(), sa.ForeignKey("rental_options.id"), nullable=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("daily_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contract_options_contract_id", "contract_options", ["contract_id"])

    op.create_table(
        "inspections",
        _id(),
        _tenant_id(),
        sa.Column(
            "contract_id", sa.Uuid(),
            sa.ForeignKey("rental_contracts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("vehicle_id", sa.Uuid(), sa.ForeignKey("vehicles.id"), nullable=False),
        sa.Column("conducted_by_user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("type", sa.Enum("departure", "return", name="inspection_type"), nullable=False),
        sa.Column("is_draft", sa.Boolean(), nullable=False),
        sa.Column("mileage", sa.Integer(), nullable=False),
        sa.Column(
            "fuel_level",
            sa.Enum("empty", "quarter", "half", "three_quarter", "full", name="fuel_level"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("conducted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_inspections_tenant_id", "inspections", ["tenant_id"])
    op.create_index("ix_inspections_contract_id", "inspections", ["contract_id"])

    op.create_table(
        "inspection_damages",
        _id(),
        sa.Column(
            "inspection_id", sa.Uuid(),
            sa.ForeignKey("inspections.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("zone", sa.String(20), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("severity", sa.String(10), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("is_pre_existing", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_inspection_damages_inspection_id", "inspection_damages", ["inspection_id"])

    op.create_table(
        "invoices",
        _id(),
        _tenant_id(),
        sa.Column("contract_id", sa.Uuid(), nullable=False),
        sa.Column("client_id", sa.Uuid(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("invoice_number", sa.String(20), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "pending", "invoiced", "verification", "paid", "conflict", "cancelled",
                name="invoice_status",
            ),
            nullable=False,
        ),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("line_items", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("issued_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["contract_id"],
            ["rental_contracts.id"],
            name="fk_invoices_contract_id",
            ondelete="RESTRICT",
        ),
        sa.UniqueConstraint("tenant_id", "invoice_number", name="uq_invoices_tenant_invoice_number"),
    )
    op.create_index("ix_invoices_tenant_id", "invoices", ["tenant_id"])
    op.create_index("ix_invoices_contract_id", "invoices", ["contract_id"], unique=True)
    op.create_index("ix_invoices_client_id", "invoices", ["client_id"])
    op.create_index("ix_invoices_invoice_number", "invoices", ["invoice_number"])
    op.create_index("ix_invoices_status", "invoices", ["status"])

    op.create_table(
        "payments",
        _id(),
        _tenant_id(),
        sa.Column("invoice_id", sa.Uuid(), nullable=False),
        sa.Column("processed_by_user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("method", sa.Enum(*PAYMENT_METHODS, name="payment_method"), nullable=False),
        sa.Column("reference", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("paid_at", sa.DateTime(), nullable=False),
        sa.Column("transaction_hash", sa.String(64), nullable=False),
        sa.Column("previous_hash", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["invoice_id"],
            ["invoices.id"],
            name="fk_payments_invoice_id",
            ondelete="RESTRICT",
        ),
    )
    op.create_index("ix_payments_tenant_id", "payments", ["tenant_id"])
    op.create_index("ix_payments_invoice_id", "payments", ["invoice_id"])
    op.create_index("ix_payments_transaction_hash", "payments", ["transaction_hash"], unique=True)
    op.create_index("ix_payments_previous_hash", "payments", ["previous_hash"])

    op.create_table(
        "maintenance_records",
        _id(),
        _tenant_id(),
        sa.Column(
            "vehicle_id", sa.Uuid(),
            sa.ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("created_by_user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column(
            "type",
            sa.Enum(
                "regular_service", "repair", "technical_inspection", "tires", "other",
                name="maintenance_type",
            ),
            nullable=False,
        ),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("open", "in_progress", "completed", name="maintenance_status"),
            nullable=False,
        ),
        sa.Column("urgency", sa.Enum("low", "medium", "high", name="maintenance_urgency"), nullable=False),
        sa.Column("estimated_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("final_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("mechanic_name", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_maintenance_records_tenant_id", "maintenance_records", ["tenant_id"])
    op.create_index("ix_maintenance_records_vehicle_id", "maintenance_records", ["vehicle_id"])
    op.create_index("ix_maintenance_records_status", "maintenance_records", ["status"])

    op.create_table(
        "audit_logs",
        _id(),
        _tenant_id(),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("changes", sa.JSON(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_tenant_id", "audit_logs", ["tenant_id"])
    op.create_index("ix_audit_logs_entity_type", "audit_logs", ["entity_type"])
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    for table in (
        "audit_logs",
        "maintenance_records",
        "payments",
        "invoices",
        "inspection_damages",
        "inspections",
        "contract_options",
        "rental_contracts",
        "rental_options",
        "clients",
        "vehicles",
        "vehicle_categories",
        "users",
        "tenants",
    ):
        op.drop_table(table)
