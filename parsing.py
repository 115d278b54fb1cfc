# parsing.py

import math
from datetime import datetime

DATE_FORMATS = ("%m/%d/%Y %I:%M %p", "%m/%d/%Y %H:%M", "%m/%d/%Y", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d")


def clean_number(num_str):
    """Parse a money string such as "$1,234.50" or "(12.00)" into a float.

    Accounting parentheses mean negative. Raises ValueError for anything that
    is not a finite number.
    """
    num_str = str(num_str).replace('$', '').replace(',', '').strip()
    if num_str.startswith('(') and num_str.endswith(')'):
        num_str = '-' + num_str[1:-1].strip()
    value = float(num_str)
    if not math.isfinite(value):
        raise ValueError(f"Not a finite number: {num_str!r}")
    return value


def parse_trade_date(date_str):
    if not isinstance(date_str, str):
        raise ValueError(f"Unrecognised date: {date_str!r}")
    date_str = date_str.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(date_str, fmt)
        except ValueError:
            continue
    raise ValueError(f"Unrecognised date: {date_str!r}")
