"""
Workload aggregation.

Buckets task effort-hours into days (week view) or ISO weeks (month and
custom views), split into overdue / incomplete / completed. Every call
re-derives the result from the tasks it is given; nothing is cached.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Iterable, Mapping, Optional, Union

from studyplanner.config import settings
from studyplanner.models.course import WEEKDAY_LABELS
from studyplanner.models.task import WorkloadTask
from studyplanner.models.workload import (
    Bucket,
    Classification,
    DayBucket,
    SummaryTotals,
    WeekBucket,
    WorkloadOverview,
)
from studyplanner.utils.dates import (
    end_of_month,
    iso_week_number,
    iter_days,
    js_weekday,
    parse_date,
    shift_months,
    start_of_month,
    start_of_week,
    to_timezone,
)

logger = logging.getLogger(__name__)

TaskLike = Union[WorkloadTask, Mapping[str, Any]]


def _coerce_task(task: TaskLike) -> WorkloadTask:
    if isinstance(task, WorkloadTask):
        return task
    return WorkloadTask.model_validate(task)


def _resolve_clock(now: Optional[datetime], tz: Optional[tzinfo]) -> tuple[datetime, tzinfo]:
    if tz is None:
        tz = settings.get_tzinfo()
    if now is None:
        return datetime.now(tz), tz
    return to_timezone(now, tz), tz


def is_completed(task: TaskLike) -> bool:
    return _coerce_task(task).status == "completed"


def is_overdue(task: TaskLike, now: datetime, tz: Optional[tzinfo] = None) -> bool:
    return classify(task, now, tz=tz) == "overdue"


def is_incomplete(task: TaskLike, now: datetime, tz: Optional[tzinfo] = None) -> bool:
    return classify(task, now, tz=tz) == "incomplete"


def classify(task: TaskLike, now: datetime, *, tz: Optional[tzinfo] = None) -> Classification:
    task = _coerce_task(task)
    if task.status == "completed":
        return "completed"
    if task.deadline is None:
        return "none"
    now, tz = _resolve_clock(now, tz)
    if to_timezone(task.deadline, tz) < now:
        return "overdue"
    return "incomplete"


def _accumulate(bucket: Bucket, task: WorkloadTask, now: datetime, tz: tzinfo) -> None:
    kind = classify(task, now, tz=tz)
    if kind == "completed":
        bucket.completed += task.hours
    elif kind == "overdue":
        bucket.overdue += task.hours
    elif kind == "incomplete":
        bucket.incomplete += task.hours


def aggregate_by_week(
    tasks: Iterable[TaskLike],
    week_offset: int = 0,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> list[DayBucket]:
    """Seven day-buckets, Monday to Sunday, for the week ``week_offset`` weeks from ``now``."""
    now, tz = _resolve_clock(now, tz)
    monday = start_of_week(now + timedelta(weeks=week_offset)).date()

    buckets: dict[date, DayBucket] = {}
    for i in range(7):
        day = monday + timedelta(days=i)
        buckets[day] = DayBucket(date=day, label=WEEKDAY_LABELS[js_weekday(day)])

    for raw in tasks:
        task = _coerce_task(raw)
        if task.deadline is None:
            continue
        bucket = buckets.get(to_timezone(task.deadline, tz).date())
        if bucket is None:
            continue
        _accumulate(bucket, task, now, tz)

    return list(buckets.values())


def _aggregate_weeks(
    tasks: Iterable[TaskLike],
    start: date,
    end: date,
    label_format: str,
    now: datetime,
    tz: tzinfo,
) -> list[WeekBucket]:
    weeks: dict[int, WeekBucket] = {}
    for day in iter_days(start, end):
        week_number = iso_week_number(day)
        if week_number not in weeks:
            weeks[week_number] = WeekBucket(
                week_number=week_number, label=label_format.format(week_number)
            )

    for raw in tasks:
        task = _coerce_task(raw)
        if task.deadline is None:
            continue
        deadline_day = to_timezone(task.deadline, tz).date()
        if not start <= deadline_day <= end:
            continue
        bucket = weeks.get(iso_week_number(deadline_day))
        if bucket is None:
            continue
        _accumulate(bucket, task, now, tz)

    logger.debug("Built %d week buckets for %s..%s", len(weeks), start, end)
    return sorted(weeks.values(), key=lambda b: b.week_number)


def aggregate_by_month(
    tasks: Iterable[TaskLike],
    month_offset: int = 0,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> list[WeekBucket]:
    """One bucket per ISO week touched by the month ``month_offset`` months from ``now``."""
    now, tz = _resolve_clock(now, tz)
    target = shift_months(now.date(), month_offset)
    return _aggregate_weeks(
        tasks, start_of_month(target), end_of_month(target), "Week {}", now, tz
    )


def aggregate_by_custom_range(
    tasks: Iterable[TaskLike],
    start_date: Union[str, date, None],
    end_date: Union[str, date, None],
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> list[WeekBucket]:
    """Week buckets for an inclusive user-picked range; empty for a missing or inverted range."""
    start = parse_date(start_date)
    end = parse_date(end_date)
    if start is None or end is None or start > end:
        return []
    now, tz = _resolve_clock(now, tz)
    return _aggregate_weeks(tasks, start, end, "W{}", now, tz)


def total(bucket: Bucket) -> float:
    return bucket.overdue + bucket.incomplete + bucket.completed


def summarize(buckets: Iterable[Bucket]) -> SummaryTotals:
    totals = SummaryTotals()
    for bucket in buckets:
        totals.total_overdue += bucket.overdue
        totals.total_incomplete += bucket.incomplete
        totals.total_completed += bucket.completed
    return totals


def calculate_workload_overview(
    tasks: Iterable[TaskLike],
    *,
    now: Optional[datetime] = None,
    window_days: Optional[int] = None,
    tz: Optional[tzinfo] = None,
) -> WorkloadOverview:
    """Headline numbers for the dashboard: open hours, hours due soon, hours overdue."""
    now, tz = _resolve_clock(now, tz)
    window_end = now + timedelta(days=window_days or settings.upcoming_window_days)

    overview = WorkloadOverview(generated_at=now)
    for raw in tasks:
        task = _coerce_task(raw)
        if task.status == "completed":
            continue
        overview.task_count += 1
        overview.total_hours += task.hours
        if task.deadline is None:
            continue
        deadline = to_timezone(task.deadline, tz)
        if deadline < now:
            overview.overdue_task_count += 1
            overview.overdue_hours += task.hours
        elif deadline <= window_end:
            overview.upcoming_task_count += 1
            overview.upcoming_window_hours += task.hours

    return overview
