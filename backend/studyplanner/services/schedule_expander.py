"""
Course schedule expansion.

Turns a course's date range, lecture weekdays and ECTS load into the
"Lecture N" / "Assignment N" task records stored for that course.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time, tzinfo
from typing import Iterable, Optional

from studyplanner.config import settings
from studyplanner.models.course import CourseSchedule, WeeklyHours
from studyplanner.models.task import GeneratedTask
from studyplanner.utils.dates import iter_days, js_weekday

logger = logging.getLogger(__name__)

# ECTS credits that correspond to 2 hours/week of lectures and 2 of assignments
ECTS_PER_UNIT = 5.0
HOURS_PER_UNIT = 2

DEADLINE_TIME = time(23, 59, 59)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def convert_credits_to_weekly_hours(credits: float) -> WeeklyHours:
    ratio = credits / ECTS_PER_UNIT
    return WeeklyHours(
        lecture_hours=ratio * HOURS_PER_UNIT,
        assignment_hours=ratio * HOURS_PER_UNIT,
    )


def expand_schedule(
    user_id: str,
    course_id: str,
    credits: float,
    start_date: date,
    end_date: date,
    weekdays: Iterable[int],
    *,
    tz: Optional[tzinfo] = None,
) -> list[GeneratedTask]:
    """
    Enumerate every day in [start_date, end_date] whose weekday (0=Sunday) is in
    ``weekdays`` and emit a lecture/assignment pair due at 23:59:59 that day.

    An inverted range or an empty weekday set yields an empty list.
    """
    if tz is None:
        tz = settings.get_tzinfo()
    hours = convert_credits_to_weekly_hours(credits)
    lecture_hours = round_half_up(hours.lecture_hours)
    assignment_hours = round_half_up(hours.assignment_hours)
    wanted = set(weekdays)

    start = start_date.date() if isinstance(start_date, datetime) else start_date
    end = end_date.date() if isinstance(end_date, datetime) else end_date

    tasks: list[GeneratedTask] = []
    counter = 1
    for day in iter_days(start, end):
        if js_weekday(day) not in wanted:
            continue
        deadline = datetime.combine(day, DEADLINE_TIME, tzinfo=tz)
        tasks.append(
            GeneratedTask(
                user_id=user_id,
                course_id=course_id,
                name=f"Lecture {counter}",
                effort_hours=lecture_hours,
                deadline=deadline,
            )
        )
        tasks.append(
            GeneratedTask(
                user_id=user_id,
                course_id=course_id,
                name=f"Assignment {counter}",
                effort_hours=assignment_hours,
                deadline=deadline,
            )
        )
        counter += 1

    logger.debug(
        "Expanded course %s schedule %s..%s into %d tasks", course_id, start, end, len(tasks)
    )
    return tasks


def expand_course(
    user_id: str, course: CourseSchedule, *, tz: Optional[tzinfo] = None
) -> list[GeneratedTask]:
    return expand_schedule(
        user_id,
        str(course.id),
        course.ects_points,
        course.start_date,
        course.end_date,
        course.lecture_weekdays,
        tz=tz,
    )
