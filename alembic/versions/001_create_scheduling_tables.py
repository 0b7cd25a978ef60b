"""Create scheduling tables

Revision ID: 001_scheduling
Revises: None
Create Date: 2026-10-18

Creates doctors, family_members, doctor_weekly_templates,
doctor_schedule_overrides and bookings, with:
- one active weekly template per (doctor, day_of_week)
- one override per (doctor, date)
- one seat-holding booking per (patient, doctor, date)
- one booking per (patient, idempotency_key)
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision = "001_scheduling"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    ]


def upgrade() -> None:
    """Create scheduling tables and their uniqueness rules."""

    # =========================================================================
    # Doctors and family members (read models)
    # =========================================================================
    op.create_table(
        "doctors",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=True),
        sa.Column("hospital_id", UUID(as_uuid=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("verification_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column(
            "consultation_types",
            sa.JSON(),
            nullable=False,
            server_default=sa.text("'[\"in_person\"]'"),
            comment="Offered consultation types: in_person, video, chat",
        ),
        sa.Column("fee_in_person", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("fee_video", sa.Numeric(10, 2), nullable=True),
        sa.Column("fee_chat", sa.Numeric(10, 2), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False, server_default="INR"),
        sa.Column("slot_duration_minutes", sa.Integer(), nullable=False, server_default="15"),
        sa.Column("max_patients_per_slot", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("ix_doctors_user_id", "doctors", ["user_id"])
    op.create_index("ix_doctors_hospital_id", "doctors", ["hospital_id"])

    op.create_table(
        "family_members",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("patient_id", UUID(as_uuid=True), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=False, server_default=""),
        sa.Column("relationship", sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_family_members_patient_id", "family_members", ["patient_id"])

    # =========================================================================
    # Weekly templates and overrides
    # =========================================================================
    op.create_table(
        "doctor_weekly_templates",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "doctor_id",
            UUID(as_uuid=True),
            sa.ForeignKey("doctors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("day_of_week", sa.String(10), nullable=False, comment="monday .. sunday"),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("break_start", sa.Time(), nullable=True),
        sa.Column("break_end", sa.Time(), nullable=True),
        sa.Column("slot_duration_minutes", sa.Integer(), nullable=False, server_default="15"),
        sa.Column("max_patients_per_slot", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "uq_weekly_templates_active_day",
        "doctor_weekly_templates",
        ["doctor_id", "day_of_week"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "doctor_schedule_overrides",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "doctor_id",
            UUID(as_uuid=True),
            sa.ForeignKey("doctors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("override_date", sa.Date(), nullable=False),
        sa.Column(
            "override_type",
            sa.String(20),
            nullable=False,
            comment="holiday, leave, special_hours",
        ),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("doctor_id", "override_date", name="uq_schedule_overrides_doctor_date"),
    )

    # =========================================================================
    # Bookings
    # =========================================================================
    op.create_table(
        "bookings",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("booking_reference", sa.String(32), nullable=False, unique=True),
        sa.Column("patient_id", UUID(as_uuid=True), nullable=False),
        sa.Column("doctor_id", UUID(as_uuid=True), sa.ForeignKey("doctors.id"), nullable=False),
        sa.Column("hospital_id", UUID(as_uuid=True), nullable=True),
        sa.Column("family_member_id", UUID(as_uuid=True), sa.ForeignKey("family_members.id"), nullable=True),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("consultation_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("consultation_fee", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("platform_fee", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="INR"),
        sa.Column("payment_status", sa.String(20), nullable=False),
        sa.Column("payment_ref", sa.String(100), nullable=True),
        sa.Column("refund_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("symptoms", sa.Text(), nullable=True),
        sa.Column("patient_notes", sa.Text(), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("checked_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("no_show_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rescheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_by", sa.String(20), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("rescheduled_from", sa.String(16), nullable=True, comment="YYYY-MM-DD HH:MM"),
        sa.Column("reschedule_reason", sa.Text(), nullable=True),
        sa.Column("idempotency_key", sa.String(255), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("patient_id", "idempotency_key", name="uq_bookings_patient_idempotency_key"),
    )
    op.create_index("ix_bookings_patient_id", "bookings", ["patient_id"])
    op.create_index("ix_bookings_hospital_id", "bookings", ["hospital_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_doctor_slot", "bookings", ["doctor_id", "appointment_date", "start_time"])
    op.create_index(
        "uq_bookings_active_patient_doctor_date",
        "bookings",
        ["patient_id", "doctor_id", "appointment_date"],
        unique=True,
        postgresql_where=sa.text("status NOT IN ('cancelled', 'no_show')"),
    )


def downgrade() -> None:
    """Drop scheduling tables."""
    op.drop_index("uq_bookings_active_patient_doctor_date", table_name="bookings")
    op.drop_index("ix_bookings_doctor_slot", table_name="bookings")
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_hospital_id", table_name="bookings")
    op.drop_index("ix_bookings_patient_id", table_name="bookings")
    op.drop_table("bookings")

    op.drop_table("doctor_schedule_overrides")

    op.drop_index("uq_weekly_templates_active_day", table_name="doctor_weekly_templates")
    op.drop_table("doctor_weekly_templates")

    op.drop_index("ix_family_members_patient_id", table_name="family_members")
    op.drop_table("family_members")

    op.drop_index("ix_doctors_hospital_id", table_name="doctors")
    op.drop_index("ix_doctors_user_id", table_name="doctors")
    op.drop_table("doctors")
