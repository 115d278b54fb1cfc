# pnl.py

import abc
import calendar
import csv
import io
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, Mapping, Optional

from models import db, DailyPnLRecord
from parsing import clean_number, parse_trade_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyPnL:
    amount: float
    is_gain: bool

    @classmethod
    def from_amount(cls, amount):
        return cls(amount=amount, is_gain=amount > 0)


# Demo values keyed by day of month
SAMPLE_DAILY_PNL = {
    1: DailyPnL(-123.45, False),
    3: DailyPnL(456.78, True),
    5: DailyPnL(-89.32, False),
    8: DailyPnL(234.56, True),
    10: DailyPnL(-45.67, False),
    15: DailyPnL(678.90, True),
    17: DailyPnL(-321.54, False),
    22: DailyPnL(432.10, True),
    25: DailyPnL(-234.56, False),
    28: DailyPnL(567.89, True),
    31: DailyPnL(-178.90, False),
}


class PnLSource(abc.ABC):
    """Where the calendar gets its per-day profit/loss from."""

    @abc.abstractmethod
    def lookup(self, day: date) -> Optional[DailyPnL]:
        """Return the recorded P&L for ``day`` or None if nothing was traded."""

    def get(self, day: date) -> Optional[float]:
        entry = self.lookup(day)
        return None if entry is None else entry.amount

    def for_month(self, year, month) -> Dict[date, DailyPnL]:
        days_in_month = calendar.monthrange(year, month)[1]
        result = {}
        for day_number in range(1, days_in_month + 1):
            day = date(year, month, day_number)
            entry = self.lookup(day)
            if entry is not None:
                result[day] = entry
        return result


def lookup_pnl(source, day):
    return source.lookup(day)


class StaticPnLSource(PnLSource):
    def __init__(self, table: Mapping[date, DailyPnL] = None):
        self.table = dict(table or {})

    def lookup(self, day):
        return self.table.get(day)


class DayOfMonthPnLSource(PnLSource):
    """Demo source keyed by day of month, so the same values show up in every month."""

    def __init__(self, table: Mapping[int, DailyPnL] = None):
        self.table = dict(SAMPLE_DAILY_PNL if table is None else table)

    def lookup(self, day):
        return self.table.get(day.day)


class DatabasePnLSource(PnLSource):
    """Reads and writes the daily_pnl table. Needs an application context."""

    def lookup(self, day):
        record = DailyPnLRecord.query.filter_by(day=day).first()
        if record is None:
            return None
        return DailyPnL(amount=record.amount, is_gain=record.is_gain)

    def for_month(self, year, month):
        start = date(year, month, 1)
        end = date(year, month, calendar.monthrange(year, month)[1])
        records = (
            DailyPnLRecord.query
            .filter(DailyPnLRecord.day >= start, DailyPnLRecord.day <= end)
            .order_by(DailyPnLRecord.day)
            .all()
        )
        return {record.day: DailyPnL(amount=record.amount, is_gain=record.is_gain) for record in records}

    def record(self, day, amount, is_gain=None, commit=True):
        """Set the P&L for ``day``, replacing whatever was stored."""
        record = DailyPnLRecord.query.filter_by(day=day).first()
        if record is None:
            record = DailyPnLRecord(day=day)
            db.session.add(record)
        record.amount = amount
        record.is_gain = amount > 0 if is_gain is None else is_gain
        if commit:
            db.session.commit()
        return record

    def import_rows(self, amounts_by_day):
        """Add imported amounts onto the stored days and return how many days changed."""
        for day, amount in sorted(amounts_by_day.items()):
            existing = self.get(day) or 0.0
            self.record(day, existing + amount, commit=False)
        db.session.commit()
        logger.info("Imported P&L for %d days", len(amounts_by_day))
        return len(amounts_by_day)


def parse_pnl_csv(data):
    """Sum the NetPl column of a broker CSV export per day.

    Returns ``(amounts_by_day, rejected)`` where rejected counts rows that
    could not be read.
    """
    stream = io.StringIO(data)
    try:
        dialect = csv.Sniffer().sniff(data, delimiters=",;\t")
    except csv.Error:
        dialect = csv.get_dialect('excel')
    csv_input = csv.DictReader(stream, dialect=dialect)

    amounts = defaultdict(float)
    rejected = 0
    for row in csv_input:
        try:
            day = parse_trade_date(row['Date']).date()
            amounts[day] += clean_number(row['NetPl'])
        except (KeyError, TypeError, ValueError) as e:
            rejected += 1
            logger.warning("Error processing row %s: %s", row, e)
    return dict(amounts), rejected
