import re
from datetime import datetime
from typing import Optional, Tuple

from hardware_store.errors import ValidationError

# Accepts "YYYY-MM", "YYYY/MM" and anything starting with "YYYY-MM-" (e.g. a full date)
_PERIOD_RE = re.compile(r"^\s*(\d{4})[-/](\d{2})(?:$|[-/T ])")


def parse_period(label: str) -> Tuple[int, int]:
    """Split a period label into (year, month)."""
    match = _PERIOD_RE.match(label or "")
    if not match:
        raise ValidationError(f"Invalid period '{label}', expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month in period '{label}'")
    return year, month


def format_period(year: int, month: int) -> str:
    return f"{int(year):04d}-{int(month):02d}"


def normalize_period(label: str) -> str:
    return format_period(*parse_period(label))


def current_period(now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return format_period(now.year, now.month)
