# trades.py

import abc
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List

from sqlalchemy.exc import SQLAlchemyError

from models import DEFAULT_PORTFOLIO, Side, Status, Trade, TradeEntry
from parsing import clean_number

logger = logging.getLogger(__name__)

FORM_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M"


class ValidationError(ValueError):
    """One or more trade form fields are missing or malformed."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{name}: {message}" for name, message in self.errors.items()))


class StorageError(RuntimeError):
    """Saving a trade failed. The caller may retry."""

    retryable = True


@dataclass
class TradeForm:
    """The add-trade form exactly as typed, before any validation."""

    portfolio: str = DEFAULT_PORTFOLIO
    side: str = Side.LONG.value
    symbol: str = ""
    fee: str = ""
    entries: List[str] = field(default_factory=lambda: [""])
    status: str = Status.COMPLETED.value
    timestamp: object = field(default_factory=lambda: datetime.now().replace(second=0, microsecond=0))

    def add_entry(self, price=""):
        self.entries.append(price)
        return len(self.entries)

    @classmethod
    def from_mapping(cls, form_data):
        """Build a form from request.form (or any mapping with getlist)."""
        if hasattr(form_data, "getlist"):
            entries = form_data.getlist("entry")
        else:
            entries = list(form_data.get("entry", []))
        return cls(
            portfolio=form_data.get("portfolio", DEFAULT_PORTFOLIO),
            side=form_data.get("side", Side.LONG.value),
            symbol=form_data.get("symbol", ""),
            fee=form_data.get("fee", ""),
            entries=entries or [""],
            status=form_data.get("status", Status.COMPLETED.value),
            timestamp=form_data.get("timestamp", ""),
        )


def _parse_amount(raw, label):
    value = clean_number(raw)
    if value < 0:
        raise ValueError(f"{label} cannot be negative")
    return value


def _parse_timestamp(raw):
    if isinstance(raw, datetime):
        return raw
    raw = (raw or "").strip()
    for fmt in (FORM_TIMESTAMP_FORMAT, "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M"):
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    raise ValueError("expected YYYY-MM-DDTHH:MM")


def validate_trade_form(form, portfolios=(DEFAULT_PORTFOLIO,)):
    """Check every field of ``form`` and return the cleaned values.

    All problems are collected before a single ValidationError is raised.
    """
    errors = {}
    cleaned = {}

    if form.portfolio not in portfolios:
        errors["portfolio"] = f"unknown portfolio {form.portfolio!r}"
    cleaned["portfolio"] = form.portfolio

    try:
        cleaned["side"] = Side((form.side or "").strip().lower())
    except ValueError:
        errors["side"] = "must be long or short"

    try:
        cleaned["status"] = Status((form.status or "").strip().lower())
    except ValueError:
        errors["status"] = "must be completed or pending"

    symbol = (form.symbol or "").strip().upper()
    if not symbol:
        errors["symbol"] = "is required"
    cleaned["symbol"] = symbol

    try:
        cleaned["fee"] = _parse_amount(form.fee, "fee")
    except ValueError as e:
        errors["fee"] = f"invalid fee {form.fee!r} ({e})"

    # Empty slots are unused "Add More" rows
    raw_entries = [raw for raw in form.entries if str(raw).strip()]
    prices = []
    for index, raw in enumerate(raw_entries, start=1):
        try:
            prices.append(_parse_amount(raw, "entry"))
        except ValueError as e:
            errors[f"entry_{index}"] = f"invalid entry price {raw!r} ({e})"
    if not raw_entries:
        errors["entries"] = "at least one entry price is required"
    cleaned["entries"] = prices

    try:
        cleaned["timestamp"] = _parse_timestamp(form.timestamp)
    except ValueError as e:
        errors["timestamp"] = str(e)

    if errors:
        raise ValidationError(errors)
    return cleaned


def submit_trade(form, repository=None, portfolios=(DEFAULT_PORTFOLIO,)):
    """Validate ``form``, build the Trade and hand it to ``repository`` if one is given."""
    try:
        cleaned = validate_trade_form(form, portfolios)
    except ValidationError as e:
        logger.warning("Rejected trade form: %s", e)
        raise

    trade = Trade(
        portfolio=cleaned["portfolio"],
        side=cleaned["side"],
        symbol=cleaned["symbol"],
        fee=cleaned["fee"],
        status=cleaned["status"],
        timestamp=cleaned["timestamp"],
        entries=[TradeEntry(position=i, price=price) for i, price in enumerate(cleaned["entries"])],
    )

    if repository is not None:
        trade_id = repository.save(trade)
        logger.info("Saved trade %s (%s %s)", trade_id, trade.side.value, trade.symbol)
    return trade


class TradeRepository(abc.ABC):
    @abc.abstractmethod
    def save(self, trade) -> int:
        """Persist ``trade`` and return its id. Raises StorageError on failure."""

    @abc.abstractmethod
    def list(self):
        ...

    def count(self):
        return len(self.list())


class InMemoryTradeRepository(TradeRepository):
    def __init__(self):
        self.trades = []

    def save(self, trade):
        trade.id = len(self.trades) + 1
        self.trades.append(trade)
        return trade.id

    def list(self):
        return list(self.trades)


class SQLAlchemyTradeRepository(TradeRepository):
    """Stores trades through a SQLAlchemy session (usually ``db.session``)."""

    def __init__(self, session):
        self.session = session

    def save(self, trade):
        try:
            self.session.add(trade)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Could not save trade %s", trade.symbol)
            raise StorageError(f"Could not save trade: {e}") from e
        return trade.id

    def list(self):
        return self.session.query(Trade).order_by(Trade.timestamp.desc()).all()

    def count(self):
        return self.session.query(Trade).count()
