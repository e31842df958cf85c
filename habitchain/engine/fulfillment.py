"""
Fulfillment rules — pure functions, no DB access.

A habit's stored (type, goal, direction) is turned into one of three rules.
Anything that doesn't form a valid rule is never fulfilled; rejecting bad
configs is the job of habit creation, not of this module.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional, Union

logger = logging.getLogger(__name__)

GAUGE_TOLERANCE = Decimal("0.05")  # ±5% band around a gauge goal


class HabitType(str, Enum):
    BOOLEAN = "boolean"
    COUNTER = "counter"
    GAUGE = "gauge"


class Direction(str, Enum):
    GTE = "gte"
    LTE = "lte"


@dataclass(frozen=True)
class HabitConfig:
    type: str
    goal: Optional[float] = None
    direction: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "HabitConfig":
        goal = row.get("goal")
        return cls(
            type=row.get("type") or HabitType.BOOLEAN.value,
            goal=float(goal) if goal is not None else None,
            direction=row.get("direction"),
        )


@dataclass(frozen=True)
class BooleanRule:
    pass


@dataclass(frozen=True)
class CounterRule:
    goal: float
    direction: Direction


@dataclass(frozen=True)
class GaugeRule:
    goal: float


Rule = Union[BooleanRule, CounterRule, GaugeRule]


def to_rule(config: HabitConfig) -> Rule | None:
    """Returns None when the config is inconsistent for its type."""
    try:
        habit_type = HabitType(config.type)
    except ValueError:
        return None

    if habit_type is HabitType.BOOLEAN:
        return BooleanRule()
    if config.goal is None:
        return None
    if habit_type is HabitType.GAUGE:
        return GaugeRule(goal=config.goal)
    try:
        return CounterRule(goal=config.goal, direction=Direction(config.direction))
    except ValueError:
        return None


def is_fulfilled(config: HabitConfig, total: float | None) -> bool:
    """Whether one day's summed value completes the habit. None means no log that day."""
    if total is None:
        return False

    rule = to_rule(config)
    if rule is None:
        logger.debug("Inconsistent habit config %s treated as not fulfilled", config)
        return False

    if isinstance(rule, BooleanRule):
        return total > 0
    if isinstance(rule, CounterRule):
        if rule.direction is Direction.GTE:
            return total >= rule.goal
        return total <= rule.goal
    # Inclusive band, compared as decimals
    goal = Decimal(str(rule.goal))
    low = goal * (1 - GAUGE_TOLERANCE)
    high = goal * (1 + GAUGE_TOLERANCE)
    return low <= Decimal(str(total)) <= high


def fulfilled_dates(config: HabitConfig, daily_totals: Mapping[str, float]) -> list[str]:
    return sorted(day for day, total in daily_totals.items() if is_fulfilled(config, total))
