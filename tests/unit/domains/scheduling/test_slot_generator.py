"""
Unit tests for SlotGenerator.

Covers template expansion, breaks, overrides, past-slot filtering and the
configuration guards.
"""

from datetime import date, datetime, time, timedelta
from uuid import uuid4

import pytest

from medbook.core.domain import ConfigurationError
from medbook.domains.scheduling.domain.entities import ScheduleOverride
from medbook.domains.scheduling.domain.services import SlotGenerator
from medbook.domains.scheduling.domain.value_objects import DayOfWeek, OverrideType


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _override(doctor_id, day: date, override_type: OverrideType, start=None, end=None) -> ScheduleOverride:
    return ScheduleOverride(
        id=uuid4(),
        doctor_id=doctor_id,
        override_date=day,
        override_type=override_type,
        start_time=start,
        end_time=end,
        reason="clinic closed" if override_type != OverrideType.SPECIAL_HOURS else None,
    )


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def generator() -> SlotGenerator:
    return SlotGenerator(max_iterations=1440)


# ============================================================================
# Template expansion
# ============================================================================


@pytest.mark.unit
def test_monday_morning_yields_six_half_hour_slots(generator, doctor, template_factory, clock, monday):
    """Test Monday 09:00-12:00 with 30-minute slots gives six empty slots of capacity 1."""
    # Arrange
    template = template_factory(doctor.id)

    # Act
    slots = generator.generate(monday, template, None, doctor, clock.now())

    # Assert
    assert [s.start_time for s in slots] == [
        time(9, 0),
        time(9, 30),
        time(10, 0),
        time(10, 30),
        time(11, 0),
        time(11, 30),
    ]
    assert all(s.max_capacity == 1 and s.booked_count == 0 for s in slots)
    assert slots[-1].end_time == time(12, 0)
    assert all(s.duration_minutes == 30 for s in slots)


@pytest.mark.unit
def test_slots_carry_doctor_consultation_types(generator, doctor, template_factory, clock, monday):
    """Test every slot offers the doctor's consultation types."""
    slots = generator.generate(monday, template_factory(doctor.id), None, doctor, clock.now())

    assert all(s.consultation_types == tuple(doctor.consultation_types) for s in slots)


@pytest.mark.unit
def test_partial_trailing_slot_is_not_emitted(generator, doctor, template_factory, clock, monday):
    """Test a window that does not divide evenly drops the incomplete last slot."""
    template = template_factory(doctor.id, end_time=time(10, 10), slot_duration_minutes=20)

    slots = generator.generate(monday, template, None, doctor, clock.now())

    assert [s.start_time for s in slots] == [time(9, 0), time(9, 20), time(9, 40)]


@pytest.mark.unit
def test_template_capacity_is_applied(generator, doctor, template_factory, clock, monday):
    template = template_factory(doctor.id, max_patients_per_slot=4)

    slots = generator.generate(monday, template, None, doctor, clock.now())

    assert {s.max_capacity for s in slots} == {4}


@pytest.mark.unit
def test_break_removes_overlapping_slots(generator, doctor, template_factory, clock, monday):
    """Test slots intersecting the break are skipped, even partially."""
    # Arrange: 45-minute slots, break 10:00-10:30 cuts the 09:45 slot
    template = template_factory(
        doctor.id,
        slot_duration_minutes=45,
        break_start=time(10, 0),
        break_end=time(10, 30),
    )

    # Act
    slots = generator.generate(monday, template, None, doctor, clock.now())

    # Assert
    assert [s.start_time for s in slots] == [time(9, 0), time(10, 30), time(11, 15)]


@pytest.mark.unit
def test_inverted_break_is_ignored(generator, doctor, template_factory, clock, monday):
    """Test a break whose start is not before its end means no break."""
    template = template_factory(doctor.id, break_start=time(10, 30), break_end=time(10, 0))

    slots = generator.generate(monday, template, None, doctor, clock.now())

    assert len(slots) == 6


@pytest.mark.unit
def test_no_template_means_no_slots(generator, doctor, clock, monday):
    assert generator.generate(monday, None, None, doctor, clock.now()) == ()


@pytest.mark.unit
def test_inactive_template_is_ignored(generator, doctor, template_factory, clock, monday):
    template = template_factory(doctor.id)
    template.deactivate()

    assert generator.generate(monday, template, None, doctor, clock.now()) == ()


# ============================================================================
# Overrides
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize("override_type", [OverrideType.HOLIDAY, OverrideType.LEAVE])
def test_blocking_override_removes_all_slots(generator, doctor, template_factory, clock, monday, override_type):
    """Test holidays and leave yield zero slots regardless of the template."""
    override = _override(doctor.id, monday, override_type)

    slots = generator.generate(monday, template_factory(doctor.id), override, doctor, clock.now())

    assert slots == ()


@pytest.mark.unit
def test_special_hours_replace_template_hours_without_break(generator, doctor, template_factory, clock, monday):
    """Test special hours use the template's duration and capacity but never its break."""
    # Arrange
    template = template_factory(
        doctor.id,
        max_patients_per_slot=2,
        break_start=time(10, 0),
        break_end=time(10, 30),
    )
    override = _override(doctor.id, monday, OverrideType.SPECIAL_HOURS, time(10, 0), time(11, 0))

    # Act
    slots = generator.generate(monday, template, override, doctor, clock.now())

    # Assert
    assert [s.start_time for s in slots] == [time(10, 0), time(10, 30)]
    assert {s.max_capacity for s in slots} == {2}


@pytest.mark.unit
def test_special_hours_without_template_use_doctor_defaults(generator, doctor_factory, clock, monday):
    """Test special hours on a day without a template fall back to the doctor's settings."""
    doctor = doctor_factory(slot_duration_minutes=20, max_patients_per_slot=3)
    override = _override(doctor.id, monday, OverrideType.SPECIAL_HOURS, time(14, 0), time(15, 0))

    slots = generator.generate(monday, None, override, doctor, clock.now())

    assert [s.start_time for s in slots] == [time(14, 0), time(14, 20), time(14, 40)]
    assert {s.max_capacity for s in slots} == {3}


@pytest.mark.unit
def test_special_hours_without_times_fall_back_to_template(generator, doctor, template_factory, clock, monday):
    override = _override(doctor.id, monday, OverrideType.SPECIAL_HOURS)

    slots = generator.generate(monday, template_factory(doctor.id), override, doctor, clock.now())

    assert len(slots) == 6


# ============================================================================
# Past slots
# ============================================================================


@pytest.mark.unit
def test_slots_at_or_before_now_are_dropped(generator, doctor, template_factory, clock, monday):
    """Test only slots starting strictly after now are returned."""
    # Arrange: now is exactly 10:30 on Monday
    clock.set(datetime.combine(monday, time(10, 30), tzinfo=clock.timezone))

    # Act
    slots = generator.generate(monday, template_factory(doctor.id), None, doctor, clock.now())

    # Assert
    assert [s.start_time for s in slots] == [time(11, 0), time(11, 30)]


@pytest.mark.unit
def test_past_date_has_no_slots(generator, doctor, template_factory, clock, monday):
    clock.set(datetime.combine(monday + timedelta(days=1), time(8, 0), tzinfo=clock.timezone))

    assert generator.generate(monday, template_factory(doctor.id), None, doctor, clock.now()) == ()


# ============================================================================
# Configuration guards
# ============================================================================


@pytest.mark.unit
def test_non_positive_duration_raises_configuration_error(generator, doctor, template_factory, clock, monday):
    """Test a zero duration is rejected instead of looping."""
    template = template_factory(doctor.id, slot_duration_minutes=0)

    with pytest.raises(ConfigurationError) as exc_info:
        generator.generate(monday, template, None, doctor, clock.now())

    assert exc_info.value.details["slot_duration_minutes"] == 0


@pytest.mark.unit
def test_iteration_cap_raises_configuration_error(doctor, template_factory, clock, monday):
    """Test the per-day iteration bound is enforced."""
    generator = SlotGenerator(max_iterations=3)

    with pytest.raises(ConfigurationError):
        generator.generate(monday, template_factory(doctor.id), None, doctor, clock.now())


# ============================================================================
# Properties
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "duration,break_start,break_end",
    [
        (15, time(10, 0), time(10, 45)),
        (20, time(9, 50), time(10, 10)),
        (25, time(11, 0), time(11, 5)),
        (40, None, None),
        (60, time(10, 0), time(11, 0)),
    ],
)
def test_slots_never_overlap_each_other_or_the_break(
    generator, doctor, template_factory, clock, monday, duration, break_start, break_end
):
    """Test generated slots are ordered, disjoint and clear of the break."""
    template = template_factory(
        doctor.id,
        end_time=time(13, 0),
        slot_duration_minutes=duration,
        break_start=break_start,
        break_end=break_end,
    )

    slots = generator.generate(monday, template, None, doctor, clock.now())

    assert slots
    for earlier, later in zip(slots, slots[1:]):
        assert earlier.end_time <= later.start_time
    if break_start is not None:
        for slot in slots:
            assert _minutes(slot.end_time) <= _minutes(break_start) or _minutes(slot.start_time) >= _minutes(break_end)


@pytest.mark.unit
def test_generate_range_is_keyed_by_consecutive_dates(generator, doctor, template_factory, clock):
    """Test a week starting Sunday only has slots on Monday."""
    # Arrange
    start = clock.now().date()
    templates = {DayOfWeek.MONDAY: template_factory(doctor.id)}

    # Act
    result = generator.generate_range(start, 7, templates, {}, doctor, clock.now())

    # Assert
    assert list(result) == [start + timedelta(days=i) for i in range(7)]
    assert len(result[start + timedelta(days=1)]) == 6
    assert all(not slots for day, slots in result.items() if day != start + timedelta(days=1))


@pytest.mark.unit
def test_generate_is_deterministic(generator, doctor, template_factory, clock, monday):
    template = template_factory(doctor.id)

    assert generator.generate(monday, template, None, doctor, clock.now()) == generator.generate(
        monday, template, None, doctor, clock.now()
    )
