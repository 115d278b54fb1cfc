# journal_stats.py

from dataclasses import dataclass, asdict


@dataclass
class JournalStatistics:
    count: int = 0
    total: float = 0.0
    win_rate: float = 0.0  # percentage
    average_win: float = 0.0
    average_loss: float = 0.0  # zero or negative
    profit_factor: float = 0.0
    expected_value: float = 0.0
    average_rr: float = 0.0

    def as_dict(self):
        return asdict(self)


def compute_statistics(amounts):
    """Performance figures for a list of signed P&L amounts.

    Zero amounts count towards ``count`` but are neither wins nor losses.
    Ratios that would divide by zero are reported as 0.
    """
    amounts = list(amounts)
    if not amounts:
        return JournalStatistics()

    wins = [value for value in amounts if value > 0]
    losses = [value for value in amounts if value < 0]
    count = len(amounts)

    average_win = sum(wins) / len(wins) if wins else 0.0
    average_loss = sum(losses) / len(losses) if losses else 0.0
    total_losses = -sum(losses)
    win_rate = len(wins) / count * 100
    loss_rate = len(losses) / count * 100

    return JournalStatistics(
        count=count,
        total=sum(amounts),
        win_rate=win_rate,
        average_win=average_win,
        average_loss=average_loss,
        profit_factor=sum(wins) / total_losses if total_losses else 0.0,
        expected_value=(win_rate / 100 * average_win) + (loss_rate / 100 * average_loss),
        average_rr=average_win / -average_loss if average_loss else 0.0,
    )
