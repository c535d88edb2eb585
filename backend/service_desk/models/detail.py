# ruff: noqa: TC003
from __future__ import annotations

from datetime import date

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


class ITRequestDetail(SQLModel, table=True):
    """IT-specific fields, one row per IT request."""

    __tablename__ = "it_request_detail"

    request_id: int = Field(
        sa_column=sa.Column(
            sa.Integer, sa.ForeignKey("service_request.id", ondelete="CASCADE"), primary_key=True
        ),
    )
    category: str = Field(max_length=50)
    system_name: str = Field(default="", max_length=255)
    impact: str = Field(default="Normal", max_length=50)
    urgency: str = Field(default="Normal", max_length=50)
    asset_tag: str = Field(default="", max_length=100)


class OnboardingDetail(SQLModel, table=True):
    """New-hire fields of an onboarding parent request."""

    __tablename__ = "onboarding_detail"

    request_id: int = Field(
        sa_column=sa.Column(
            sa.Integer, sa.ForeignKey("service_request.id", ondelete="CASCADE"), primary_key=True
        ),
    )
    employee_name: str = Field(max_length=255)
    position: str = Field(max_length=255)
    department: str = Field(default="", max_length=255)
    location: str = Field(default="", max_length=255)
    start_date: date
    device_type: str = Field(default="", max_length=100)
    vpn_required: bool = False
    notes: str = ""
    email_needed: bool = False
    device_needed: bool = False
    systems_requested: list[str] = Field(default_factory=list, sa_type=sa.JSON)
