import datetime as dt
from typing import Literal, Union

from pydantic import BaseModel, Field


Classification = Literal["overdue", "incomplete", "completed", "none"]


class DayBucket(BaseModel):
    date: dt.date
    label: str
    overdue: float = Field(default=0, ge=0)
    incomplete: float = Field(default=0, ge=0)
    completed: float = Field(default=0, ge=0)


class WeekBucket(BaseModel):
    week_number: int = Field(ge=1, le=53)
    label: str
    overdue: float = Field(default=0, ge=0)
    incomplete: float = Field(default=0, ge=0)
    completed: float = Field(default=0, ge=0)


Bucket = Union[DayBucket, WeekBucket]


class SummaryTotals(BaseModel):
    total_overdue: float = 0
    total_incomplete: float = 0
    total_completed: float = 0


class WorkloadOverview(BaseModel):
    generated_at: dt.datetime
    total_hours: float = 0
    upcoming_window_hours: float = 0
    overdue_hours: float = 0
    task_count: int = 0
    upcoming_task_count: int = 0
    overdue_task_count: int = 0
