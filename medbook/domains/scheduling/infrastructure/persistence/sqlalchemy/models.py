"""
Scheduling SQLAlchemy Models

Database models for scheduling domain persistence.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
    Uuid,
    text,
)

from medbook.database.base import Base, TimestampMixin

# Bookings in these statuses do not occupy a seat
RELEASED_STATUSES_SQL = "status NOT IN ('cancelled', 'no_show')"


class DoctorModel(Base, TimestampMixin):
    """Doctor profile (read model maintained by the profile subsystem)."""

    __tablename__ = "doctors"

    id = Column(Uuid, primary_key=True)
    user_id = Column(Uuid, nullable=True, index=True)
    hospital_id = Column(Uuid, nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    verification_status = Column(String(20), default="pending", nullable=False)

    consultation_types = Column(JSON, default=lambda: ["in_person"], nullable=False)
    fee_in_person = Column(Numeric(10, 2), default=0, nullable=False)
    fee_video = Column(Numeric(10, 2), nullable=True)
    fee_chat = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(3), default="INR", nullable=False)

    slot_duration_minutes = Column(Integer, default=15, nullable=False)
    max_patients_per_slot = Column(Integer, default=1, nullable=False)

    def __repr__(self) -> str:
        return f"<Doctor(id={self.id}, hospital_id={self.hospital_id})>"


class FamilyMemberModel(Base, TimestampMixin):
    __tablename__ = "family_members"

    id = Column(Uuid, primary_key=True)
    patient_id = Column(Uuid, nullable=False, index=True)
    full_name = Column(String(200), nullable=False, default="")
    relationship = Column(String(50), nullable=True)


class WeeklyTemplateModel(Base, TimestampMixin):
    """Recurring working hours per doctor and day of week."""

    __tablename__ = "doctor_weekly_templates"

    id = Column(Uuid, primary_key=True)
    doctor_id = Column(Uuid, ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(String(10), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    break_start = Column(Time, nullable=True)
    break_end = Column(Time, nullable=True)
    slot_duration_minutes = Column(Integer, nullable=False, default=15)
    max_patients_per_slot = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, default=True, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index(
            "uq_weekly_templates_active_day",
            "doctor_id",
            "day_of_week",
            unique=True,
            postgresql_where=text("is_active"),
        ),
    )

    def __repr__(self) -> str:
        return f"<WeeklyTemplate(doctor_id={self.doctor_id}, day={self.day_of_week}, active={self.is_active})>"


class ScheduleOverrideModel(Base, TimestampMixin):
    """Single-date exception to a doctor's weekly template."""

    __tablename__ = "doctor_schedule_overrides"

    id = Column(Uuid, primary_key=True)
    doctor_id = Column(Uuid, ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False)
    override_date = Column(Date, nullable=False)
    override_type = Column(String(20), nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    reason = Column(Text, nullable=True)

    __table_args__ = (UniqueConstraint("doctor_id", "override_date", name="uq_schedule_overrides_doctor_date"),)


class BookingModel(Base, TimestampMixin):
    """Bookings; never hard-deleted."""

    __tablename__ = "bookings"

    id = Column(Uuid, primary_key=True)
    booking_reference = Column(String(32), nullable=False, unique=True)

    patient_id = Column(Uuid, nullable=False, index=True)
    doctor_id = Column(Uuid, ForeignKey("doctors.id"), nullable=False)
    hospital_id = Column(Uuid, nullable=True, index=True)
    family_member_id = Column(Uuid, ForeignKey("family_members.id"), nullable=True)

    appointment_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    consultation_type = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, index=True)

    consultation_fee = Column(Numeric(10, 2), nullable=False, default=0)
    platform_fee = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="INR")
    payment_status = Column(String(20), nullable=False)
    payment_ref = Column(String(100), nullable=True)
    refund_amount = Column(Numeric(10, 2), nullable=True)

    symptoms = Column(Text, nullable=True)
    patient_notes = Column(Text, nullable=True)

    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    checked_in_at = Column(DateTime(timezone=True), nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    no_show_at = Column(DateTime(timezone=True), nullable=True)
    rescheduled_at = Column(DateTime(timezone=True), nullable=True)

    cancelled_by = Column(String(20), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    rescheduled_from = Column(String(16), nullable=True)
    reschedule_reason = Column(Text, nullable=True)

    idempotency_key = Column(String(255), nullable=True)
    version = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_bookings_doctor_slot", "doctor_id", "appointment_date", "start_time"),
        Index(
            "uq_bookings_active_patient_doctor_date",
            "patient_id",
            "doctor_id",
            "appointment_date",
            unique=True,
            postgresql_where=text(RELEASED_STATUSES_SQL),
        ),
        UniqueConstraint("patient_id", "idempotency_key", name="uq_bookings_patient_idempotency_key"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, ref={self.booking_reference}, status={self.status})>"
