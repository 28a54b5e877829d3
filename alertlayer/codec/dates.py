"""
Calendar helpers for YYDDD date values.

Alert dates are compared as plain integers (``year % 100 * 1000 + day``),
where ``day`` is 0-based as in the tile encoding: 16000 is 1 January 2016.
These helpers translate between that form and :class:`datetime.date` for the
layer's date-range setters.
"""

from datetime import date, timedelta

from alertlayer.core.exceptions import ValidationError


def date_value(day: date) -> int:
    """
    YYDDD value of a calendar date

    Examples:
        >>> date_value(date(2016, 1, 1))
        16000
    """
    return (day.year % 100) * 1000 + day.timetuple().tm_yday - 1


def date_from_value(value: int, century: int = 2000) -> date:
    """
    Calendar date of a YYDDD value

    Inverse of :func:`date_value`; day 0 is January 1st.

    Args:
        value: YYDDD date value
        century: Century added to the two-digit year

    Raises:
        ValidationError: If the day part does not fit in the year

    Examples:
        >>> date_from_value(15031)
        datetime.date(2015, 2, 1)
    """
    year_offset, day_of_year = divmod(value, 1000)
    start = date(century + year_offset, 1, 1)
    days_in_year = (date(start.year + 1, 1, 1) - start).days
    if day_of_year >= days_in_year:
        raise ValidationError(f"Day {day_of_year} does not exist in {start.year}")
    return start + timedelta(days=day_of_year)
