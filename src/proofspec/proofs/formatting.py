"""
Display formatting for proof rows.

Date and number fields get a `<property>Formatted` companion holding the
value as it should be printed. Original values are left untouched so
downstream consumers can still sort and filter on them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, MutableMapping
from datetime import date, datetime, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from proofspec.config import get_settings
from proofspec.core.enums import ProofFieldFormat
from proofspec.core.schemas import ProofField, UserContext
from proofspec.tokens import number_to_string

logger = logging.getLogger(__name__)

FORMATTED_SUFFIX = "Formatted"

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _zone(time_zone: str | None) -> tzinfo:
    name = time_zone or get_settings().localization.default_time_zone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"[Formatting] Unknown time zone '{name}', using UTC")
        return timezone.utc


def _parse(value: datetime | date | str) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def date_to_localized_string(
    value: datetime | date | str | None,
    time_zone: str | None = None,
    language: str | None = None,
    locale: str | None = None,
) -> str | None:
    """
    Render a date in the user's time zone, e.g. "Jan 5, 2024, 03:04 PM PST".

    Naive values and ISO strings without an offset are taken as UTC.
    Returns None for empty or unparseable input.

    Args:
        value: Date, datetime or ISO 8601 string.
        time_zone: IANA zone name; defaults to the configured default zone.
        language: Language code of the user (month names are English only).
        locale: Region code of the user.
    """
    if not value:
        return None
    parsed = _parse(value)
    if parsed is None:
        logger.debug(f"[Formatting] Unable to parse date '{value}'")
        return None

    local = parsed.astimezone(_zone(time_zone))
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return (
        f"{_MONTHS[local.month - 1]} {local.day}, {local.year}, "
        f"{hour:02d}:{local.minute:02d} {meridiem} {local.tzname()}"
    )


def format_number(value: int | float, field: ProofField) -> str:
    """Format a number for display according to the field's format."""
    if field.format == ProofFieldFormat.PERCENT:
        if value:
            return f"{value:.2f}%"
        if value == 0:
            return "0%"
        return ""
    return number_to_string(value)


def add_formatted_values(
    row: MutableMapping[str, Any],
    date_fields: Iterable[ProofField],
    number_fields: Iterable[ProofField],
    user: UserContext,
) -> None:
    """Add `<property>Formatted` companions to row without overwriting existing ones."""
    for field in date_fields:
        key = field.property + FORMATTED_SUFFIX
        if row.get(key):
            continue
        value = row.get(field.property)
        if isinstance(value, (str, date)):
            formatted = date_to_localized_string(
                value, user.time_zone, user.language, user.locale
            )
            if formatted is not None:
                row[key] = formatted

    for field in number_fields:
        key = field.property + FORMATTED_SUFFIX
        if row.get(key):
            continue
        value = row.get(field.property)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            row[key] = format_number(value, field)
