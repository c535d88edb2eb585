"""Initial schema: requests, detail records, vehicles, bookings, audit trail.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "vehicle",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("plate_number", sa.String(length=50), nullable=False),
        sa.Column("plate_code", sa.String(length=50), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=20), server_default="ACTIVE", nullable=False),
    )
    op.create_index("ix_vehicle_status", "vehicle", ["status"])

    op.create_table(
        "service_request",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("requester_name", sa.String(length=255), nullable=False),
        sa.Column("department", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=50), server_default="PENDING", nullable=False),
        sa.Column("current_step", sa.String(length=50), nullable=False),
        sa.Column("assigned_role", sa.String(length=50), nullable=False),
        sa.Column("requester_employee_id", sa.Integer(), nullable=False),
        sa.Column("assigned_employee_id", sa.Integer(), nullable=True),
        sa.Column("parent_request_id", sa.Integer(), sa.ForeignKey("service_request.id"), nullable=True),
        sa.Column("system_key", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_service_request_type", "service_request", ["type"])
    op.create_index("ix_service_request_requester_employee_id", "service_request", ["requester_employee_id"])
    op.create_index("ix_service_request_parent_request_id", "service_request", ["parent_request_id"])
    op.create_index("ix_request_type_status", "service_request", ["type", "status"])
    op.create_index("ix_request_assigned_role", "service_request", ["assigned_role"])

    op.create_table(
        "it_request_detail",
        sa.Column(
            "request_id",
            sa.Integer(),
            sa.ForeignKey("service_request.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("system_name", sa.String(length=255), nullable=False),
        sa.Column("impact", sa.String(length=50), nullable=False),
        sa.Column("urgency", sa.String(length=50), nullable=False),
        sa.Column("asset_tag", sa.String(length=100), nullable=False),
    )

    op.create_table(
        "onboarding_detail",
        sa.Column(
            "request_id",
            sa.Integer(),
            sa.ForeignKey("service_request.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("employee_name", sa.String(length=255), nullable=False),
        sa.Column("position", sa.String(length=255), nullable=False),
        sa.Column("department", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("device_type", sa.String(length=100), nullable=False),
        sa.Column("vpn_required", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.String(), nullable=False),
        sa.Column("email_needed", sa.Boolean(), nullable=False),
        sa.Column("device_needed", sa.Boolean(), nullable=False),
        sa.Column("systems_requested", sa.JSON(), nullable=True),
    )

    op.create_table(
        "car_booking",
        sa.Column(
            "request_id",
            sa.Integer(),
            sa.ForeignKey("service_request.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("vehicle_id", sa.Integer(), sa.ForeignKey("vehicle.id"), nullable=False),
        sa.Column("start_at", sa.DateTime(), nullable=False),
        sa.Column("end_at", sa.DateTime(), nullable=False),
        sa.Column("pickup_location", sa.String(length=255), nullable=False),
        sa.Column("destination", sa.String(length=255), nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("passengers", sa.Integer(), nullable=True),
    )
    op.create_index("ix_car_booking_vehicle_id", "car_booking", ["vehicle_id"])
    op.create_index("ix_booking_vehicle_interval", "car_booking", ["vehicle_id", "start_at", "end_at"])

    op.create_table(
        "audit_entry",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("request_id", sa.Integer(), sa.ForeignKey("service_request.id"), nullable=False),
        sa.Column("action_type", sa.String(length=50), nullable=False),
        sa.Column("from_status", sa.String(length=50), nullable=True),
        sa.Column("to_status", sa.String(length=50), nullable=True),
        sa.Column("actor_employee_id", sa.Integer(), nullable=True),
        sa.Column("note", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_entry_request_id", "audit_entry", ["request_id"])
    op.create_index("ix_audit_entry_created_at", "audit_entry", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_entry")
    op.drop_table("car_booking")
    op.drop_table("onboarding_detail")
    op.drop_table("it_request_detail")
    op.drop_table("service_request")
    op.drop_table("vehicle")
