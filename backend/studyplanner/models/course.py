from datetime import date, datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from studyplanner.utils.dates import parse_lecture_weekdays


# 0=Sunday .. 6=Saturday
WEEKDAY_LABELS: dict[int, str] = {
    0: "Sun",
    1: "Mon",
    2: "Tue",
    3: "Wed",
    4: "Thu",
    5: "Fri",
    6: "Sat",
}


class WeeklyHours(BaseModel):
    lecture_hours: float
    assignment_hours: float


class CourseSchedule(BaseModel):
    """Scheduling fields of a course; the only inputs the task generator needs."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Union[str, int, None] = Field(default=None, alias="_id")
    name: Optional[str] = None
    ects_points: float
    start_date: date
    end_date: date
    lecture_weekdays: list[int] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if value is None or isinstance(value, (str, int)):
            return value
        return str(value)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _date_only(cls, value: Any) -> Any:
        # datetimes (e.g. from Mongo) keep their calendar day, time is dropped
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value

    @field_validator("lecture_weekdays", mode="before")
    @classmethod
    def _parse_lecture_weekdays(cls, value: Any) -> list[int]:
        return parse_lecture_weekdays(value)
