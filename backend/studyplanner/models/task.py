import math
from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from studyplanner.utils.dates import parse_datetime


TaskStatus = Literal["pending", "todo", "on-hold", "working", "completed"]
TASK_STATUSES: tuple[str, ...] = ("pending", "todo", "on-hold", "working", "completed")


class WorkloadTask(BaseModel):
    """A task as seen by the workload views: only the fields the aggregation reads."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Union[str, int, None] = Field(default=None, alias="_id")
    name: str = ""
    status: TaskStatus = "pending"
    deadline: Optional[datetime] = None
    effort_hours: Optional[float] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if value is None or isinstance(value, (str, int)):
            return value
        return str(value)

    @field_validator("name", mode="before")
    @classmethod
    def _stringify_name(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
        return value if value in TASK_STATUSES else "pending"

    @field_validator("deadline", mode="before")
    @classmethod
    def _lenient_deadline(cls, value: Any) -> Optional[datetime]:
        return parse_datetime(value)

    @field_validator("effort_hours", mode="before")
    @classmethod
    def _lenient_hours(cls, value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        try:
            hours = float(value)
        except (TypeError, ValueError):
            return None
        # nan and inf would poison every bucket total
        return hours if math.isfinite(hours) else None

    @property
    def hours(self) -> float:
        # missing hours count as zero; negative hours never reduce a total
        return max(0.0, self.effort_hours or 0.0)


class GeneratedTask(BaseModel):
    user_id: str
    course_id: str
    name: str
    effort_hours: int
    deadline: datetime
    status: Literal["pending"] = "pending"
