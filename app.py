# In app.py

import logging
from datetime import date, datetime

from flask import Flask, render_template_string, request, redirect, url_for, flash
from sqlalchemy.exc import SQLAlchemyError

from models import db, DEFAULT_PORTFOLIO, Side, Status
from Dashboard import init_dashboard
from journal_stats import compute_statistics
from palette import AppColors, pnl_color, rgba_css
from pnl import DatabasePnLSource, DayOfMonthPnLSource, parse_pnl_csv
from trade_calendar import CalendarView, MONTHLY, TIMEFRAMES, YEARLY, parse_weekday
from trades import (
    FORM_TIMESTAMP_FORMAT, SQLAlchemyTradeRepository, StorageError, TradeForm,
    ValidationError, submit_trade,
)

# Tabs of the bottom bar: (endpoint, label)
TABS = [
    ('index', 'Home'),
    ('live', 'Live Trades'),
    ('add_trade', 'Add Trade'),
    ('history', 'History'),
    ('alarms', 'Alarms'),
]

STUB_SCREENS = [
    ('live', 'Live Trades'),
    ('history', 'History'),
    ('alarms', 'Alarms'),
]

LAYOUT = '''
<!doctype html>
<html>
<head>
  <title>{{ title }}</title>
  <style>
    body { background: {{ colors.background }}; color: {{ colors.text_primary }}; font-family: sans-serif; margin: 0; }
    main { max-width: 800px; margin: 0 auto; padding: 16px 16px 80px; }
    a { color: {{ colors.accent }}; }
    .muted { color: {{ colors.text_secondary }}; }
    .card { background: {{ colors.card_background }}; border-radius: 16px; padding: 16px; margin-bottom: 16px; }
    .cards { display: grid; grid-template-columns: 1fr 1fr; gap: 16px; }
    .calendar { display: grid; grid-template-columns: repeat(7, 1fr); gap: 2px; }
    .day { background: {{ colors.card_background }}; min-height: 60px; text-align: center; padding-top: 6px; }
    .blank { min-height: 60px; }
    .weekday { text-align: center; color: {{ colors.text_secondary }}; }
    .pl { font-size: 0.75em; border-radius: 4px; padding: 2px 4px; display: inline-block; margin-top: 4px; }
    .flash { background: {{ colors.card_background }}; border-left: 4px solid {{ colors.warning_accent }}; padding: 8px; margin-bottom: 8px; }
    nav { position: fixed; bottom: 0; left: 0; right: 0; display: flex; background: {{ colors.card_background }}; }
    nav a { flex: 1; text-align: center; padding: 12px 0; text-decoration: none; color: {{ colors.text_secondary }}; }
    nav a.active { color: {{ colors.accent }}; }
  </style>
</head>
<body>
  <main>
    {% for message in get_flashed_messages() %}
      <div class="flash">{{ message }}</div>
    {% endfor %}
    __BODY__
  </main>
  <nav>
    {% for endpoint, label in tabs %}
      <a href="{{ url_for(endpoint) }}" class="{{ 'active' if request.endpoint == endpoint else '' }}">{{ label }}</a>
    {% endfor %}
  </nav>
</body>
</html>
'''

DASHBOARD_BODY = '''
<h1>{{ portfolio }}</h1>
<p><a href="{{ url_for('calendar_view') }}">Calendar</a> | <a href="/dash/">Chart</a> | <a href="{{ url_for('upload') }}">Upload CSV</a></p>
<h2>Statistics</h2>
<p><span class="muted">Trade Count:</span> <b>{{ trade_count }}</b></p>
<div class="cards">
  <div class="card"><div class="muted">Average RR</div><h3>{{ "%.2f"|format(stats.average_rr) }}</h3></div>
  <div class="card"><div class="muted">Win Rate</div><h3>{{ "%.0f"|format(stats.win_rate) }}%</h3></div>
  <div class="card"><div class="muted">Expected Value</div><h3>{{ "%.2f"|format(stats.expected_value) }}</h3></div>
  <div class="card"><div class="muted">Profit Factor</div><h3>{{ "%.2f"|format(stats.profit_factor) }}</h3></div>
  <div class="card"><div class="muted">Average Win</div><h3 style="color: {{ colors.secondary_accent }}">{{ "%.2f"|format(stats.average_win) }}</h3></div>
  <div class="card"><div class="muted">Average Loss</div><h3 style="color: {{ colors.warning_accent }}">{{ "%.2f"|format(stats.average_loss) }}</h3></div>
</div>
<h2>Finished Trades</h2>
<div class="card">
  <h3>Total PNL</h3>
  {% if stats.count %}
    <p style="color: {{ pnl_color(stats.total > 0) }}">{{ "%.2f"|format(stats.total) }}</p>
  {% else %}
    <p class="muted">No Finished Trades Found</p>
  {% endif %}
</div>
<div class="card">
  <h3>Daily PNL</h3>
  {% for day, entry in month_pnl %}
    <div>{{ day.isoformat() }}: <span style="color: {{ pnl_color(entry.is_gain) }}">{{ "%.2f"|format(entry.amount) }}</span></div>
  {% else %}
    <p class="muted">No Finished Trades Found</p>
  {% endfor %}
</div>
'''

CALENDAR_BODY = '''
<h1>Calendar</h1>
<p>
  {% for frame in timeframes %}
    {% if frame == view.timeframe %}<b>{{ frame|capitalize }}</b>{% else %}<a href="{{ url_for('calendar_view', year=view.reference_date.year, month=view.reference_date.month, timeframe=frame) }}">{{ frame|capitalize }}</a>{% endif %}
  {% endfor %}
</p>
<p>
  {% if previous_date %}<a href="{{ url_for('calendar_view', year=previous_date.year, month=previous_date.month, timeframe=view.timeframe) }}">&lsaquo; Previous</a>{% endif %}
  <b>{{ view.title }}</b>
  {% if next_date %}<a href="{{ url_for('calendar_view', year=next_date.year, month=next_date.month, timeframe=view.timeframe) }}">Next &rsaquo;</a>{% endif %}
</p>
{% for grid in view.months %}
  {% if view.timeframe == 'yearly' %}<h3>{{ grid.title }}</h3>{% endif %}
  <div class="calendar">
    {% for label in grid.weekday_labels %}<div class="weekday">{{ label }}</div>{% endfor %}
    {% for week in view.annotated_weeks(grid) %}
      {% for cell in week %}
        {% if cell is none %}
          <div class="blank"></div>
        {% else %}
          {% set day, entry = cell %}
          <div class="day">
            <div>{{ day.day }}</div>
            {% if entry %}
              <div class="pl" style="color: {{ pnl_color(entry.is_gain) }}; background: {{ rgba_css(pnl_color(entry.is_gain), 0.2) }}">{{ "%.1f"|format(entry.amount|abs) }}</div>
            {% endif %}
          </div>
        {% endif %}
      {% endfor %}
    {% endfor %}
  </div>
  <p class="muted">Total for {{ grid.title }}: {{ "%.2f"|format(view.total(grid)) }}</p>
{% endfor %}
'''

ADD_TRADE_BODY = '''
<h1>Add Trade</h1>
<form method="post">
  <div class="card">
    <label>Portfolio</label>
    <select name="portfolio">
      {% for name in portfolios %}<option {{ 'selected' if name == form.portfolio else '' }}>{{ name }}</option>{% endfor %}
    </select>
  </div>
  <div class="card">
    <label>Type</label>
    {% for side in sides %}
      <label><input type="radio" name="side" value="{{ side.value }}" {{ 'checked' if side.value == form.side else '' }}> {{ side.label }}</label>
    {% endfor %}
  </div>
  <div class="card"><label>Symbol</label> <input name="symbol" value="{{ form.symbol }}"></div>
  <div class="card"><label>Fee</label> <input name="fee" value="{{ form.fee }}"></div>
  <div class="card">
    <label>Entries</label> <button type="submit" name="add_entry" value="1">Add More</button>
    {% for price in form.entries %}
      <div><input name="entry" placeholder="Entry {{ loop.index }}" value="{{ price }}"></div>
    {% endfor %}
  </div>
  <div class="card">
    <label>Status</label>
    {% for status in statuses %}
      <label><input type="radio" name="status" value="{{ status.value }}" {{ 'checked' if status.value == form.status else '' }}> {{ status.label }}</label>
    {% endfor %}
  </div>
  <div class="card"><label>Date and Time</label> <input type="datetime-local" name="timestamp" value="{{ timestamp }}"></div>
  <input type="submit" value="Submit">
</form>
'''

STUB_BODY = '''
<h1>{{ title }}</h1>
'''

UPLOAD_BODY = '''
<h1>Upload CSV File to Populate Daily P&amp;L</h1>
<p class="muted">Columns: Date, NetPl</p>
<form method="post" enctype="multipart/form-data">
  <input type="file" name="file" accept=".csv">
  <input type="submit" value="Upload">
</form>
'''


def build_pnl_source(kind):
    if kind == 'database':
        return DatabasePnLSource()
    if kind == 'sample':
        return DayOfMonthPnLSource()
    raise ValueError(f"Unknown JOURNAL_PNL_SOURCE: {kind!r}")


def create_app(test_config=None, pnl_source=None, trade_repository=None):
    app = Flask(__name__)

    # Defaults, then FLASK_* environment variables, then explicit overrides
    app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///trading.db'
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SECRET_KEY'] = 'your-secret-key'
    app.config['JOURNAL_FIRST_WEEKDAY'] = 'MON'
    app.config['JOURNAL_PORTFOLIOS'] = [DEFAULT_PORTFOLIO]
    app.config['JOURNAL_PNL_SOURCE'] = 'database'
    app.config['JOURNAL_ENABLE_DASHBOARD'] = True
    app.config['LOG_LEVEL'] = 'INFO'
    app.config.from_prefixed_env()
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
    )
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize the SQLAlchemy database with the Flask app
    db.init_app(app)

    # Create database tables if they don't exist
    with app.app_context():
        db.create_all()

    if pnl_source is None:
        pnl_source = build_pnl_source(app.config['JOURNAL_PNL_SOURCE'])
    if trade_repository is None:
        trade_repository = SQLAlchemyTradeRepository(db.session)
    app.extensions['journal'] = {
        'pnl_source': pnl_source,
        'trade_repository': trade_repository,
    }

    first_weekday = parse_weekday(app.config['JOURNAL_FIRST_WEEKDAY'])
    # A plain FLASK_JOURNAL_PORTFOLIOS=Main arrives as a str, not a JSON list
    portfolios = app.config['JOURNAL_PORTFOLIOS']
    if isinstance(portfolios, str):
        portfolios = [portfolios]
    portfolios = tuple(portfolios)

    def render_page(body, status=200, **context):
        page = render_template_string(
            LAYOUT.replace('__BODY__', body),
            colors=AppColors, tabs=TABS, pnl_color=pnl_color, rgba_css=rgba_css, **context
        )
        return page, status

    def requested_month():
        today = date.today()
        year = request.args.get("year", today.year, type=int)
        month = request.args.get("month", today.month, type=int)
        if not (1 <= month <= 12 and 1 <= year <= 9999):
            return date(today.year, today.month, 1)
        return date(year, month, 1)

    @app.route('/')
    def index():
        today = date.today()
        month_pnl = sorted(pnl_source.for_month(today.year, today.month).items())
        stats = compute_statistics(entry.amount for _, entry in month_pnl)
        return render_page(
            DASHBOARD_BODY, title=portfolios[0], portfolio=portfolios[0],
            trade_count=trade_repository.count(), stats=stats, month_pnl=month_pnl
        )

    @app.route('/calendar')
    def calendar_view():
        timeframe = request.args.get("timeframe", MONTHLY).lower()
        if timeframe not in TIMEFRAMES:
            timeframe = MONTHLY
        view = CalendarView(requested_month(), pnl_source, first_weekday, timeframe)

        # Navigation stops at the ends of the supported year range
        try:
            previous_date = view.previous_date()
        except ValueError:
            previous_date = None
        try:
            next_date = view.next_date()
        except ValueError:
            next_date = None

        return render_page(
            CALENDAR_BODY, title="Calendar", view=view, timeframes=(MONTHLY, YEARLY),
            previous_date=previous_date, next_date=next_date
        )

    @app.route('/trades/new', methods=['GET', 'POST'])
    def add_trade():
        status = 200
        if request.method == 'POST':
            form = TradeForm.from_mapping(request.form)
            if 'add_entry' in request.form:
                form.add_entry()
            else:
                try:
                    trade = submit_trade(form, trade_repository, portfolios)
                except ValidationError as e:
                    for field_name, message in e.errors.items():
                        flash(f'{field_name}: {message}')
                    status = 400
                except StorageError as e:
                    flash(f'{e} Please try again.')
                    status = 503
                else:
                    flash(f'Saved {trade.side.label} {trade.symbol}.')
                    return redirect(url_for('index'))
        else:
            form = TradeForm()

        if isinstance(form.timestamp, datetime):
            timestamp = form.timestamp.strftime(FORM_TIMESTAMP_FORMAT)
        else:
            timestamp = form.timestamp
        return render_page(
            ADD_TRADE_BODY, status=status, title="Add Trade", form=form, timestamp=timestamp,
            portfolios=portfolios, sides=list(Side), statuses=list(Status)
        )

    def make_stub(title):
        def stub():
            return render_page(STUB_BODY, title=title)
        return stub

    for endpoint, title in STUB_SCREENS:
        app.add_url_rule(f'/{endpoint}', endpoint=endpoint, view_func=make_stub(title))

    @app.route('/upload', methods=['GET', 'POST'])
    def upload():
        if request.method == 'POST':
            if not isinstance(pnl_source, DatabasePnLSource):
                flash('The configured P&L source is read-only.')
                return redirect(request.url)
            if 'file' not in request.files:
                flash('No file part in the request.')
                return redirect(request.url)
            file = request.files['file']
            if file.filename == '':
                flash('No file selected.')
                return redirect(request.url)
            if file and file.filename.lower().endswith('.csv'):
                try:
                    data = file.stream.read().decode("UTF8")
                except UnicodeDecodeError:
                    flash('Could not read the file as UTF-8.')
                    return redirect(request.url)
                amounts_by_day, rejected = parse_pnl_csv(data)
                try:
                    count = pnl_source.import_rows(amounts_by_day)
                except SQLAlchemyError:
                    db.session.rollback()
                    app.logger.exception("P&L import failed")
                    flash('Import failed, nothing was saved.')
                    return redirect(request.url)
                flash(f'Successfully imported P&L for {count} days ({rejected} rows skipped).')
                return redirect(url_for('calendar_view'))
            else:
                flash('Invalid file format. Please upload a CSV file.')
                return redirect(request.url)
        return render_page(UPLOAD_BODY, title="Upload CSV File")

    if app.config['JOURNAL_ENABLE_DASHBOARD']:
        init_dashboard(app, pnl_source)

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True)
