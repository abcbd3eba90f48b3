from datetime import date, datetime

INDONESIAN_DAYS = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]

INDONESIAN_MONTHS = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]

ROMAN_MONTHS = [
    "I", "II", "III", "IV", "V", "VI",
    "VII", "VIII", "IX", "X", "XI", "XII",
]


def format_currency(amount) -> str:
    """1500000 -> 'Rp 1.500.000' (Rupiah has no minor unit on documents)."""
    value = round(float(amount or 0))
    sign = "-" if value < 0 else ""
    grouped = f"{abs(value):,}".replace(",", ".")
    return f"{sign}Rp {grouped}"


def format_date_indonesian(value) -> str:
    """2025-01-01 -> 'Rabu, 1 Januari 2025'. Empty string when value is missing."""
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    if isinstance(value, datetime):
        value = value.date()

    day_name = INDONESIAN_DAYS[value.weekday()]
    month_name = INDONESIAN_MONTHS[value.month - 1]
    return f"{day_name}, {value.day} {month_name} {value.year}"


def month_in_roman(value: date) -> str:
    return ROMAN_MONTHS[value.month - 1]


def format_raw_number(amount):
    """Keep whole amounts as ints so templates show 1000000, not 1000000.0."""
    value = float(amount or 0)
    return int(value) if value.is_integer() else value
