from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from studyplanner.models.course import CourseSchedule
from studyplanner.services.schedule_expander import (
    convert_credits_to_weekly_hours,
    expand_course,
    expand_schedule,
    round_half_up,
)

UTC = ZoneInfo("UTC")


def _expand(start: date, end: date, weekdays: list[int], credits: float = 5):
    return expand_schedule("user-123", "course-456", credits, start, end, weekdays, tz=UTC)


def test_convert_credits_five_ects():
    hours = convert_credits_to_weekly_hours(5)
    assert hours.lecture_hours == 2
    assert hours.assignment_hours == 2


def test_convert_credits_fractional_ects():
    hours = convert_credits_to_weekly_hours(7.5)
    assert hours.lecture_hours == 3
    assert hours.assignment_hours == 3

    hours = convert_credits_to_weekly_hours(3.5)
    assert hours.lecture_hours == pytest.approx(1.4)


def test_convert_credits_is_symmetric():
    for credits in (0, 2.5, 3, 5, 7.5, 10, 12, 100, -5):
        hours = convert_credits_to_weekly_hours(credits)
        assert hours.lecture_hours == hours.assignment_hours


def test_convert_credits_passes_zero_and_negative_through():
    assert convert_credits_to_weekly_hours(0).lecture_hours == 0
    assert convert_credits_to_weekly_hours(-5).lecture_hours == -2


def test_round_half_up_differs_from_bankers_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(1.4) == 1
    assert round_half_up(0.5) == 1
    assert round_half_up(-0.5) == 0


def test_single_day_course_yields_one_pair():
    tasks = _expand(date(2024, 11, 4), date(2024, 11, 4), [1])

    assert [t.name for t in tasks] == ["Lecture 1", "Assignment 1"]
    for t in tasks:
        assert t.effort_hours == 2
        assert t.status == "pending"
        assert t.user_id == "user-123"
        assert t.course_id == "course-456"
        assert t.deadline == datetime(2024, 11, 4, 23, 59, 59, tzinfo=timezone.utc)


def test_inverted_range_yields_nothing():
    assert _expand(date(2024, 12, 31), date(2024, 1, 1), [1]) == []


def test_empty_weekdays_yields_nothing():
    assert _expand(date(2024, 11, 1), date(2024, 11, 30), []) == []


def test_multiple_weeks_count_each_matching_day():
    tasks = _expand(date(2024, 11, 4), date(2024, 11, 18), [1])

    assert len(tasks) == 6
    assert [t.name for t in tasks[::2]] == ["Lecture 1", "Lecture 2", "Lecture 3"]
    assert [t.deadline.date() for t in tasks[::2]] == [
        date(2024, 11, 4),
        date(2024, 11, 11),
        date(2024, 11, 18),
    ]


def test_counter_is_shared_across_weekdays_in_the_same_week():
    tasks = _expand(date(2024, 11, 4), date(2024, 11, 8), [1, 3])

    assert [t.name for t in tasks] == ["Lecture 1", "Assignment 1", "Lecture 2", "Assignment 2"]
    assert tasks[2].deadline.date() == date(2024, 11, 6)


def test_sunday_and_saturday_use_zero_and_six():
    tasks = _expand(date(2024, 11, 3), date(2024, 11, 9), [0, 6])

    assert [t.deadline.date() for t in tasks[::2]] == [date(2024, 11, 3), date(2024, 11, 9)]


def test_pairs_share_deadline_and_lecture_comes_first():
    tasks = _expand(date(2024, 9, 1), date(2024, 12, 20), [1, 4])

    assert len(tasks) % 2 == 0
    for i in range(0, len(tasks), 2):
        lecture, assignment = tasks[i], tasks[i + 1]
        n = i // 2 + 1
        assert lecture.name == f"Lecture {n}"
        assert assignment.name == f"Assignment {n}"
        assert lecture.deadline == assignment.deadline

    deadlines = [t.deadline for t in tasks]
    assert deadlines == sorted(deadlines)


def test_expansion_is_deterministic():
    first = _expand(date(2024, 9, 1), date(2024, 12, 20), [2, 4], credits=7.5)
    second = _expand(date(2024, 9, 1), date(2024, 12, 20), [2, 4], credits=7.5)
    assert first == second


def test_effort_hours_are_rounded_half_up():
    tasks = _expand(date(2024, 11, 4), date(2024, 11, 4), [1], credits=6.25)
    assert [t.effort_hours for t in tasks] == [3, 3]

    tasks = _expand(date(2024, 11, 4), date(2024, 11, 4), [1], credits=2.5)
    assert [t.effort_hours for t in tasks] == [1, 1]


def test_time_of_day_on_inputs_is_ignored():
    tasks = expand_schedule(
        "u",
        "c",
        5,
        datetime(2024, 11, 4, 18, 0),
        datetime(2024, 11, 4, 6, 0),
        [1],
        tz=UTC,
    )
    assert len(tasks) == 2
    assert tasks[0].deadline.time().isoformat() == "23:59:59"


def test_deadline_is_stamped_in_local_timezone():
    tz = ZoneInfo("Europe/Copenhagen")
    tasks = expand_schedule("u", "c", 5, date(2024, 11, 4), date(2024, 11, 4), [1], tz=tz)

    assert tasks[0].deadline.astimezone(timezone.utc) == datetime(
        2024, 11, 4, 22, 59, 59, tzinfo=timezone.utc
    )


def test_expand_course_reads_stored_course_fields():
    course = CourseSchedule.model_validate(
        {
            "_id": "course-1",
            "name": "Algorithms",
            "ects_points": 10,
            "start_date": "2024-11-04T00:00:00Z",
            "end_date": "2024-11-10",
            "lecture_weekdays": "[1, 5]",
        }
    )

    tasks = expand_course("user-1", course, tz=UTC)

    assert [t.name for t in tasks] == ["Lecture 1", "Assignment 1", "Lecture 2", "Assignment 2"]
    assert {t.effort_hours for t in tasks} == {4}
    assert {t.course_id for t in tasks} == {"course-1"}
