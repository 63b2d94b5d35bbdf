"""
Date pro-rating of invoice amounts into a reporting year
"""
from datetime import date
from typing import Optional


def year_bounds(year: int):
    """First and last day of a calendar year"""
    return date(year, 1, 1), date(year, 12, 31)


def days_inclusive(start: date, end: date) -> int:
    """Number of calendar days in [start, end], both ends included"""
    return (end - start).days + 1


def overlap_days(start: Optional[date], end: Optional[date], year: int) -> int:
    """Days of [start, end] that fall inside the given year (0 when disjoint or invalid)"""
    if start is None or end is None or end < start:
        return 0
    first_day, last_day = year_bounds(year)
    overlap_start = max(start, first_day)
    overlap_end = min(end, last_day)
    if overlap_end < overlap_start:
        return 0
    return days_inclusive(overlap_start, overlap_end)


def period_overlaps_year(start: Optional[date], end: Optional[date], year: int) -> bool:
    return overlap_days(start, end, year) > 0


def applicable_amount(start: Optional[date], end: Optional[date], total_amount: float, year: int) -> float:
    """
    Share of ``total_amount`` attributable to ``year`` by day count

    The period is inclusive on both ends and leap days are counted by the
    calendar arithmetic of ``datetime.date``. The sign of the amount is kept,
    so credit notes pro-rate to negative values. Missing dates, reversed
    periods, zero amounts and periods outside the year all yield 0.0.
    """
    if start is None or end is None or end < start or not total_amount:
        return 0.0
    overlapped = overlap_days(start, end, year)
    if overlapped == 0:
        return 0.0
    total_days = days_inclusive(start, end)
    if overlapped == total_days:
        return float(total_amount)
    return total_amount * overlapped / total_days


def applicable_percentage(start: Optional[date], end: Optional[date], year: int) -> float:
    """Percentage (0-100) of the period that falls inside the year"""
    if start is None or end is None or end < start:
        return 0.0
    return overlap_days(start, end, year) * 100.0 / days_inclusive(start, end)
