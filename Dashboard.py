# Dashboard.py

from datetime import date
from urllib.parse import parse_qs

import dash
from dash import dcc, html
import plotly.graph_objs as go
from dash.dependencies import Input, Output

from palette import AppColors, pnl_color


def month_from_query(search, today=None):
    """Read ?year=&month= from a URL query string, falling back to today's month."""
    today = today or date.today()
    params = parse_qs((search or "").lstrip("?"))
    try:
        year = int(params.get("year", [today.year])[0])
        month = int(params.get("month", [today.month])[0])
        return date(year, month, 1)
    except (ValueError, OverflowError):
        return date(today.year, today.month, 1)


def build_pnl_figure(month_pnl, title="Daily Profit/Loss"):
    days = sorted(month_pnl)
    trace = go.Bar(
        x=[day.isoformat() for day in days],
        y=[month_pnl[day].amount for day in days],
        marker={'color': [pnl_color(month_pnl[day].is_gain) for day in days]},
        name='Daily P/L'
    )
    layout = go.Layout(
        title=title,
        xaxis={'title': 'Day'},
        yaxis={'title': 'Net P/L'},
        paper_bgcolor=AppColors.background,
        plot_bgcolor=AppColors.card_background,
        font={'color': AppColors.text_primary},
    )
    return go.Figure(data=[trace], layout=layout)


def init_dashboard(flask_app, pnl_source):
    # Create a Dash instance that is bound to the Flask server
    dash_app = dash.Dash(
        __name__,
        server=flask_app,
        url_base_pathname='/dash/'
    )

    dash_app.layout = html.Div([
        dcc.Location(id='url', refresh=False),
        html.H1("Daily P&L"),
        dcc.Graph(id='daily-pnl-graph'),
        dcc.Interval(
            id='interval-component',
            interval=5000,  # Update every 5000 milliseconds (5 seconds)
            n_intervals=0
        )
    ])

    @dash_app.callback(
        Output('daily-pnl-graph', 'figure'),
        Input('url', 'search'),
        Input('interval-component', 'n_intervals')
    )
    def update_graph(search, n_intervals):
        month_start = month_from_query(search)
        # The database source needs the Flask app context
        with flask_app.app_context():
            month_pnl = pnl_source.for_month(month_start.year, month_start.month)
        return build_pnl_figure(month_pnl, title=f"Daily Profit/Loss, {month_start:%B %Y}")

    return dash_app
