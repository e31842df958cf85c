"""
Per-habit progress summary — pure functions, no DB access.
"""
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Mapping

from .fulfillment import HabitConfig, fulfilled_dates
from .streak import current_streak, longest_streak


@dataclass
class HabitProgress:
    fulfilled_dates: list[str] = field(default_factory=list)
    current_streak: int = 0
    longest_streak: int = 0
    today_value: float | None = None   # raw total for today, fulfilling or not

    def as_dict(self) -> dict:
        return asdict(self)


def summarize_habit(config: HabitConfig, daily_totals: Mapping[str, float], today: date) -> HabitProgress:
    """
    daily_totals maps "YYYY-MM-DD" to the summed log value for that day.
    Days without logs are simply absent.
    """
    done = fulfilled_dates(config, daily_totals)
    return HabitProgress(
        fulfilled_dates=done,
        current_streak=current_streak(done, today),
        longest_streak=longest_streak(done),
        today_value=daily_totals.get(today.isoformat()),
    )
