"""Pydantic schemas for schedules.

Learn: Day tokens are a small fixed vocabulary — M, T, W, THU, F, SAT, SUN —
accepted in any case ("thu", "Sat") and stored upper-cased. Anything else,
including the obvious-looking "Mon", is rejected with a 422 pointing at
the days_of_week field.

Times travel as "HH:MM" strings, the format an <input type="time"> sends.
"""

from datetime import datetime, time
from typing import Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

DAY_TOKENS = ("M", "T", "W", "THU", "F", "SAT", "SUN")


def normalize_days(days: list[str]) -> list[str]:
    """Upper-case, validate and de-duplicate day tokens, keeping first-seen order.

    Raises ValueError on an empty list or an unknown token.
    """
    if not days:
        raise ValueError("At least one day of the week must be provided.")

    normalized: list[str] = []
    for day in days:
        token = day.strip().upper()
        if token not in DAY_TOKENS:
            raise ValueError(
                f"Invalid day of week {day!r}. "
                "Valid options are M, T, W, Thu, F, Sat, Sun."
            )
        if token not in normalized:
            normalized.append(token)
    return normalized


class ScheduleWrite(BaseModel):
    """Body for both POST (create) and PUT (full replacement)."""

    game_title: str = Field(..., min_length=1, max_length=200)
    days_of_week: list[str] = Field(..., min_length=1)
    start_time: time
    end_time: time
    weekly: bool = True
    description: Optional[str] = Field(None, max_length=1000)

    @field_validator("days_of_week")
    @classmethod
    def check_days(cls, value: list[str]) -> list[str]:
        return normalize_days(value)


class ScheduleRead(BaseModel):
    id: int
    user_id: int
    username: str
    game_title: str
    days_of_week: list[str]
    start_time: time
    end_time: time
    is_weekly: bool
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_serializer("start_time", "end_time")
    def format_time(self, value: time) -> str:
        return value.strftime("%H:%M")
