# trade_calendar.py

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

MONTHLY = "monthly"
YEARLY = "yearly"
TIMEFRAMES = (MONTHLY, YEARLY)


def parse_weekday(value):
    """Turn 0-6 (Monday=0) or a day name like "MON" / "Sunday" into calendar's weekday int."""
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value <= 6:
            return value
        raise ValueError(f"Weekday must be between 0 and 6, got {value}")
    text = str(value).strip().lower()
    for index, label in enumerate(WEEKDAY_LABELS):
        if text and (text == label.lower() or text == calendar.day_name[index].lower()):
            return index
    if text.isdigit():
        return parse_weekday(int(text))
    raise ValueError(f"Unknown weekday: {value!r}")


@dataclass
class CalendarMonth:
    year: int
    month: int
    first_weekday: int
    weeks: List[List[Optional[date]]] = field(default_factory=list)

    @property
    def title(self):
        return date(self.year, self.month, 1).strftime("%B %Y")

    @property
    def weekday_labels(self):
        return WEEKDAY_LABELS[self.first_weekday:] + WEEKDAY_LABELS[:self.first_weekday]

    @property
    def days(self):
        return [cell for week in self.weeks for cell in week if cell is not None]

    @property
    def leading_blanks(self):
        count = 0
        for cell in self.weeks[0] if self.weeks else []:
            if cell is not None:
                break
            count += 1
        return count


def build_month_grid(reference_date, first_weekday=calendar.MONDAY) -> CalendarMonth:
    """Lay out the month containing ``reference_date`` as rows of 7 cells.

    Cells before the 1st and after the last day are ``None`` so the first day
    lands in column ``(weekday(1st) - first_weekday) % 7`` and every row is full.
    """
    first_weekday = parse_weekday(first_weekday)
    year, month = reference_date.year, reference_date.month

    # monthdayscalendar pads with 0 for days outside the month
    cal = calendar.Calendar(firstweekday=first_weekday)
    weeks = [
        [date(year, month, day) if day else None for day in week]
        for week in cal.monthdayscalendar(year, month)
    ]
    return CalendarMonth(year=year, month=month, first_weekday=first_weekday, weeks=weeks)


def build_year_grid(reference_date, first_weekday=calendar.MONDAY) -> List[CalendarMonth]:
    return [
        build_month_grid(date(reference_date.year, month, 1), first_weekday)
        for month in range(1, 13)
    ]


def shift_month(reference_date, delta):
    """Move ``reference_date`` by ``delta`` whole months.

    The day of month is clamped to the last day of the target month, so
    Jan 31 + 1 month is Feb 28 (or Feb 29 in a leap year).
    """
    year, month0 = divmod(reference_date.year * 12 + reference_date.month - 1 + delta, 12)
    month = month0 + 1
    if not 1 <= year <= 9999:
        raise ValueError(f"Shifting {reference_date} by {delta} months leaves the supported year range")
    day = min(reference_date.day, calendar.monthrange(year, month)[1])
    return reference_date.replace(year=year, month=month, day=day)


class CalendarView:
    """State behind the calendar screen: which month is shown and where its P&L comes from."""

    def __init__(self, reference_date, pnl_source=None, first_weekday=calendar.MONDAY, timeframe=MONTHLY):
        if timeframe not in TIMEFRAMES:
            raise ValueError(f"Unknown timeframe: {timeframe!r}")
        self.reference_date = reference_date
        self.pnl_source = pnl_source
        self.first_weekday = parse_weekday(first_weekday)
        self.timeframe = timeframe

    @property
    def step(self):
        return 12 if self.timeframe == YEARLY else 1

    @property
    def title(self):
        if self.timeframe == YEARLY:
            return str(self.reference_date.year)
        return self.months[0].title

    @property
    def months(self):
        if self.timeframe == YEARLY:
            return build_year_grid(self.reference_date, self.first_weekday)
        return [build_month_grid(self.reference_date, self.first_weekday)]

    def previous_date(self):
        return shift_month(self.reference_date, -self.step)

    def next_date(self):
        return shift_month(self.reference_date, self.step)

    def previous(self):
        self.reference_date = self.previous_date()
        return self.reference_date

    def next(self):
        self.reference_date = self.next_date()
        return self.reference_date

    def annotated_weeks(self, grid):
        """Pair every date cell of ``grid`` with its DailyPnL (or None)."""
        pnl_by_day = self._month_pnl(grid)
        return [
            [(cell, pnl_by_day.get(cell)) if cell is not None else None for cell in week]
            for week in grid.weeks
        ]

    def total(self, grid):
        return sum(entry.amount for entry in self._month_pnl(grid).values())

    def _month_pnl(self, grid):
        if self.pnl_source is None:
            return {}
        return self.pnl_source.for_month(grid.year, grid.month)
