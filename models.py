# models.py

import enum

from flask_sqlalchemy import SQLAlchemy

# Create the SQLAlchemy db instance.
db = SQLAlchemy()

DEFAULT_PORTFOLIO = "Default Portfolio"


class Side(enum.Enum):
    LONG = "long"
    SHORT = "short"

    @property
    def label(self):
        return "Buy (long)" if self is Side.LONG else "Sell (short)"


class Status(enum.Enum):
    COMPLETED = "completed"
    PENDING = "pending"

    @property
    def label(self):
        return self.value.capitalize()


class Trade(db.Model):
    __tablename__ = 'trades'

    id = db.Column(db.Integer, primary_key=True)
    portfolio = db.Column(db.String, nullable=False, default=DEFAULT_PORTFOLIO)
    side = db.Column(db.Enum(Side), nullable=False)
    symbol = db.Column(db.String, nullable=False)  # Instrument identifier (e.g. "BTCUSDT")
    fee = db.Column(db.Float, nullable=False, default=0.0)
    status = db.Column(db.Enum(Status), nullable=False, default=Status.COMPLETED)
    timestamp = db.Column(db.DateTime, nullable=False)  # When the trade was placed

    # Entry prices in the order they were typed
    entries = db.relationship(
        'TradeEntry',
        order_by='TradeEntry.position',
        cascade='all, delete-orphan',
        backref='trade',
    )

    @property
    def entry_prices(self):
        return [entry.price for entry in self.entries]

    def __repr__(self):
        return f'<Trade {self.id} {self.side.value if self.side else "?"} {self.symbol}>'


class TradeEntry(db.Model):
    __tablename__ = 'trade_entries'

    id = db.Column(db.Integer, primary_key=True)
    trade_id = db.Column(db.Integer, db.ForeignKey('trades.id'), nullable=False)
    position = db.Column(db.Integer, nullable=False)  # 0-based order within the trade
    price = db.Column(db.Float, nullable=False)


class DailyPnLRecord(db.Model):
    __tablename__ = 'daily_pnl'

    id = db.Column(db.Integer, primary_key=True)
    day = db.Column(db.Date, unique=True, nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False)  # Signed profit/loss for the day
    is_gain = db.Column(db.Boolean, nullable=False)  # Display color flag, kept explicitly
