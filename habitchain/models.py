import re
from datetime import date
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional

from .engine.fulfillment import Direction, HabitType

UUID4_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)
COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def _validate_uuid4(v: str) -> str:
    if not UUID4_RE.match(v.lower()):
        raise ValueError("must be a valid UUID v4")
    return v.lower()


class UserRegister(BaseModel):
    user_id: str
    display_name: str = Field(min_length=1, max_length=30)

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v):
        return _validate_uuid4(v)


class HabitCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    color: str = "#f59e0b"
    type: HabitType = HabitType.BOOLEAN
    goal: Optional[float] = Field(default=None, ge=0)
    direction: Optional[Direction] = None
    model_config = {"extra": "forbid"}

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Habit name is required")
        return v

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        if not COLOR_RE.match(v):
            raise ValueError("color must be a #rrggbb hex value")
        return v.lower()

    @model_validator(mode="after")
    def check_type_config(self):
        # This is the only place habit configs are enforced; the engine just
        # treats anything inconsistent as never fulfilled.
        if self.type is HabitType.BOOLEAN:
            if self.goal is not None or self.direction is not None:
                raise ValueError("boolean habits take no goal or direction")
        elif self.goal is None:
            raise ValueError(f"{self.type.value} habits require a goal")
        if self.type is HabitType.COUNTER and self.direction is None:
            raise ValueError("counter habits require a direction (gte or lte)")
        if self.type is HabitType.GAUGE and self.direction is not None:
            raise ValueError("gauge habits take no direction")
        return self


class LogCreate(BaseModel):
    value: float = Field(default=1.0, allow_inf_nan=False)
    logged_on: Optional[date] = None   # defaults to the current UTC day
