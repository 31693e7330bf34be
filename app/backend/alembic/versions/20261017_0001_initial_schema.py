"""initial schema

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


project_status = postgresql.ENUM(
    "planning", "active", "on_hold", "completed", "cancelled", name="project_status", create_type=False
)
equipment_status = postgresql.ENUM(
    "available", "in_use", "maintenance", "retired", name="equipment_status", create_type=False
)
timesheet_status = postgresql.ENUM("pending", "approved", "rejected", name="timesheet_status", create_type=False)
purchase_request_status = postgresql.ENUM(
    "pending", "approved", "rejected", "cancelled", name="purchase_request_status", create_type=False
)
purchase_order_status = postgresql.ENUM(
    "issued", "received", "cancelled", name="purchase_order_status", create_type=False
)

ENUM_TYPES = (
    project_status,
    equipment_status,
    timesheet_status,
    purchase_request_status,
    purchase_order_status,
)


def upgrade() -> None:
    for enum_type in ENUM_TYPES:
        enum_type.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=50), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(length=50), nullable=False, unique=True),
        sa.Column("email", sa.String(length=100), nullable=False, unique=True),
        sa.Column("first_name", sa.String(length=50), nullable=False),
        sa.Column("last_name", sa.String(length=50), nullable=False),
        sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False, unique=True),
        sa.Column("location", sa.String(length=200), nullable=False),
        sa.Column("budget", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("status", project_status, nullable=False, server_default="planning"),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("project_manager_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("budget >= 0", name="ck_projects_budget_non_negative"),
        sa.CheckConstraint("progress >= 0 AND progress <= 100", name="ck_projects_progress_range"),
    )
    op.create_index("ix_projects_project_manager_id", "projects", ["project_manager_id"])
    op.create_index("ix_projects_status", "projects", ["status"])

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("expense_date", sa.Date(), nullable=False),
        sa.Column("recorded_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("receipt_number", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_expenses_amount_non_negative"),
    )
    op.create_index("ix_expenses_project_id", "expenses", ["project_id"])
    op.create_index("ix_expenses_created_at", "expenses", ["created_at"])

    op.create_table(
        "materials",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("unit", sa.String(length=50), nullable=False),
        sa.Column("unit_cost", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("min_stock", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("category", sa.String(length=100), nullable=True),
    )

    op.create_table(
        "inventory",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("material_id", sa.Integer(), sa.ForeignKey("materials.id"), nullable=False),
        sa.Column("quantity", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("project_id", "material_id", name="uq_inventory_project_material"),
    )
    op.create_index("ix_inventory_project_id", "inventory", ["project_id"])

    op.create_table(
        "equipment",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", sa.String(length=100), nullable=False),
        sa.Column("serial_number", sa.String(length=100), nullable=True),
        sa.Column("status", equipment_status, nullable=False, server_default="available"),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_equipment_project_status", "equipment", ["project_id", "status"])

    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("employee_code", sa.String(length=50), nullable=False, unique=True),
        sa.Column("first_name", sa.String(length=50), nullable=False),
        sa.Column("last_name", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=100), nullable=True, unique=True),
        sa.Column("position", sa.String(length=100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )

    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_assignments_employee_active", "assignments", ["employee_id", "is_active"])
    op.create_index("ix_assignments_project_active", "assignments", ["project_id", "is_active"])

    op.create_table(
        "timesheets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False),
        sa.Column("work_date", sa.Date(), nullable=False),
        sa.Column("hours_worked", sa.Numeric(5, 2), nullable=False),
        sa.Column("task_description", sa.Text(), nullable=True),
        sa.Column("status", timesheet_status, nullable=False, server_default="pending"),
        sa.CheckConstraint("hours_worked >= 0 AND hours_worked <= 24", name="ck_timesheets_hours_range"),
        sa.UniqueConstraint(
            "project_id",
            "employee_id",
            "work_date",
            name="uq_timesheets_project_employee_date",
        ),
    )
    op.create_index("ix_timesheets_project_work_date", "timesheets", ["project_id", "work_date"])

    op.create_table(
        "suppliers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("contact_email", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )

    op.create_table(
        "purchase_requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("pr_number", sa.String(length=50), nullable=False, unique=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("supplier_id", sa.Integer(), sa.ForeignKey("suppliers.id"), nullable=False),
        sa.Column("requested_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", purchase_request_status, nullable=False, server_default="pending"),
        sa.Column("approved_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_amount", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("total_amount >= 0", name="ck_purchase_requests_total_non_negative"),
    )
    op.create_index("ix_purchase_requests_status", "purchase_requests", ["status"])

    op.create_table(
        "purchase_request_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "purchase_request_id",
            sa.Integer(),
            sa.ForeignKey("purchase_requests.id"),
            nullable=False,
        ),
        sa.Column("material_id", sa.Integer(), sa.ForeignKey("materials.id"), nullable=False),
        sa.Column("quantity", sa.Numeric(10, 2), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
    )
    op.create_index(
        "ix_purchase_request_items_request_id",
        "purchase_request_items",
        ["purchase_request_id"],
    )

    op.create_table(
        "purchase_orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("po_number", sa.String(length=50), nullable=False, unique=True),
        sa.Column(
            "purchase_request_id",
            sa.Integer(),
            sa.ForeignKey("purchase_requests.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("status", purchase_order_status, nullable=False, server_default="issued"),
        sa.Column("issued_date", sa.Date(), nullable=False),
        sa.Column("expected_delivery_date", sa.Date(), nullable=True),
        sa.Column("received_date", sa.Date(), nullable=True),
        sa.Column("total_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("total_amount >= 0", name="ck_purchase_orders_total_non_negative"),
    )
    op.create_index("ix_purchase_orders_status", "purchase_orders", ["status"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_notifications_user_read", "notifications", ["user_id", "is_read"])


def downgrade() -> None:
    op.drop_index("ix_notifications_user_read", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_purchase_orders_status", table_name="purchase_orders")
    op.drop_table("purchase_orders")

    op.drop_index("ix_purchase_request_items_request_id", table_name="purchase_request_items")
    op.drop_table("purchase_request_items")

    op.drop_index("ix_purchase_requests_status", table_name="purchase_requests")
    op.drop_table("purchase_requests")

    op.drop_table("suppliers")

    op.drop_index("ix_timesheets_project_work_date", table_name="timesheets")
    op.drop_table("timesheets")

    op.drop_index("ix_assignments_project_active", table_name="assignments")
    op.drop_index("ix_assignments_employee_active", table_name="assignments")
    op.drop_table("assignments")

    op.drop_table("employees")

    op.drop_index("ix_equipment_project_status", table_name="equipment")
    op.drop_table("equipment")

    op.drop_index("ix_inventory_project_id", table_name="inventory")
    op.drop_table("inventory")

    op.drop_table("materials")

    op.drop_index("ix_expenses_created_at", table_name="expenses")
    op.drop_index("ix_expenses_project_id", table_name="expenses")
    op.drop_table("expenses")

    op.drop_index("ix_projects_status", table_name="projects")
    op.drop_index("ix_projects_project_manager_id", table_name="projects")
    op.drop_table("projects")

    op.drop_table("users")
    op.drop_table("roles")

    for enum_type in reversed(ENUM_TYPES):
        enum_type.drop(op.get_bind(), checkfirst=True)
