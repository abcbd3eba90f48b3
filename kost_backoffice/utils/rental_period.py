import math
from datetime import date, timedelta

from kost_backoffice.models.enums import DurationType

# Fixed day counts, no calendar-month arithmetic
DURATION_OFFSET_DAYS = {
    DurationType.WEEKLY: 7,
    DurationType.MONTHLY: 30,
    DurationType.SEMESTER: 180,
    DurationType.YEARLY: 365,
}
FALLBACK_OFFSET_DAYS = 30

# (days per unit, unit label) for the "durasi sewa" line on the booking slip
DURATION_UNITS = {
    DurationType.WEEKLY: (7, "minggu"),
    DurationType.MONTHLY: (30, "bulan"),
    DurationType.SEMESTER: (180, "semester"),
    DurationType.YEARLY: (365, "tahun"),
}


def parse_duration_type(value):
    """Return the DurationType for value, or None when it is not recognised."""
    if isinstance(value, DurationType):
        return value
    if isinstance(value, str):
        try:
            return DurationType(value.strip().upper())
        except ValueError:
            return None
    return None


def calculate_end_date(start_date: date, duration_type) -> date:
    duration = parse_duration_type(duration_type)
    offset = DURATION_OFFSET_DAYS.get(duration, FALLBACK_OFFSET_DAYS)
    return start_date + timedelta(days=offset)


def describe_duration(start_date: date, end_date: date, duration_type) -> str:
    days = abs((end_date - start_date).days)
    duration = parse_duration_type(duration_type)

    if duration not in DURATION_UNITS:
        return f"{days} hari"

    unit_days, label = DURATION_UNITS[duration]
    return f"{math.ceil(days / unit_days)} {label}"
