"""
Course Task Service
Keeps a course's auto-generated Lecture/Assignment tasks in sync with its schedule.
Any change to start date, end date, weekdays or ECTS replaces the whole set:
existing tasks for the course are deleted and a fresh expansion is inserted.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase
from pymongo import ASCENDING

from studyplanner.config import settings
from studyplanner.database.connection import get_db
from studyplanner.models.course import CourseSchedule
from studyplanner.models.task import GeneratedTask, WorkloadTask
from studyplanner.services.schedule_expander import expand_course

logger = logging.getLogger(__name__)


SCHEDULE_FIELDS = ("start_date", "end_date", "lecture_weekdays", "ects_points")


class CourseNotFoundError(LookupError):
    def __init__(self, course_id: str):
        super().__init__(f"Course not found: {course_id}")
        self.course_id = course_id


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _course_filter(course_id: str) -> dict[str, Any]:
    if ObjectId.is_valid(course_id):
        return {"_id": ObjectId(course_id)}
    return {"_id": course_id}


def _to_storable(value: Any) -> Any:
    # BSON has no date-only type
    if isinstance(value, date) and not isinstance(value, datetime):
        return value.isoformat()
    return value


def has_schedule_changes(updates: dict[str, Any]) -> bool:
    return any(updates.get(field) is not None for field in SCHEDULE_FIELDS)


class CourseTaskService:
    """Service for generating and regenerating course tasks"""

    def __init__(self, db: AsyncIOMotorDatabase, *, use_transaction: Optional[bool] = None):
        self.db = db
        self.courses = db.courses
        self.tasks = db.tasks
        self.use_transaction = (
            settings.regeneration_use_transaction if use_transaction is None else use_transaction
        )

    async def get_course(self, course_id: str) -> CourseSchedule:
        doc = await self.courses.find_one(_course_filter(course_id))
        if not doc:
            raise CourseNotFoundError(course_id)
        return CourseSchedule.model_validate(doc)

    async def delete_course_tasks(
        self,
        course_id: str,
        user_id: str,
        *,
        session: Optional[AsyncIOMotorClientSession] = None,
    ) -> int:
        result = await self.tasks.delete_many(
            {"course_id": course_id, "user_id": user_id}, session=session
        )
        return result.deleted_count

    async def insert_generated_tasks(
        self,
        tasks: list[GeneratedTask],
        *,
        session: Optional[AsyncIOMotorClientSession] = None,
    ) -> int:
        if not tasks:
            return 0
        now = _now()
        docs = [{**t.model_dump(), "created_at": now, "updated_at": now} for t in tasks]
        result = await self.tasks.insert_many(docs, session=session)
        return len(result.inserted_ids)

    async def generate_for_new_course(
        self, user_id: str, course: CourseSchedule
    ) -> list[GeneratedTask]:
        """Insert the initial task set for a freshly created course."""
        if course.id is None:
            # generated tasks are found again only by their course id
            raise ValueError("Cannot generate tasks for a course without an id")
        generated = expand_course(user_id, course)
        inserted = await self.insert_generated_tasks(generated)
        logger.info("Generated %d tasks for new course %s", inserted, course.id)
        return generated

    async def regenerate_for_course(self, user_id: str, course_id: str) -> list[GeneratedTask]:
        """
        Replace every generated task of a course with a fresh expansion.

        Returns:
            The newly inserted task records, in generation order.

        Raises:
            CourseNotFoundError: no course with ``course_id`` exists.
        """
        course = await self.get_course(course_id)
        generated = expand_course(user_id, course.model_copy(update={"id": course_id}))

        if self.use_transaction:
            async with await self.db.client.start_session() as session:
                async with session.start_transaction():
                    deleted = await self.delete_course_tasks(course_id, user_id, session=session)
                    inserted = await self.insert_generated_tasks(generated, session=session)
        else:
            deleted = await self.delete_course_tasks(course_id, user_id)
            inserted = await self.insert_generated_tasks(generated)

        logger.info(
            "Regenerated course %s tasks: removed %d, inserted %d", course_id, deleted, inserted
        )
        return generated

    async def update_course_schedule(
        self, user_id: str, course_id: str, updates: dict[str, Any]
    ) -> Optional[list[GeneratedTask]]:
        """
        Apply course field updates; regenerate tasks only when a scheduling field changed.

        Returns:
            The regenerated tasks, or None when no scheduling field was touched.
        """
        payload = {k: _to_storable(v) for k, v in updates.items() if v is not None}
        if not payload:
            return None

        result = await self.courses.update_one(
            {**_course_filter(course_id), "user_id": user_id},
            {"$set": {**payload, "updated_at": _now()}},
        )
        if result.matched_count == 0:
            raise CourseNotFoundError(course_id)

        if not has_schedule_changes(payload):
            return None
        return await self.regenerate_for_course(user_id, course_id)

    async def delete_course(self, course_id: str, user_id: str) -> bool:
        """Delete a course, removing its tasks first so none are orphaned."""
        try:
            await self.delete_course_tasks(course_id, user_id)
        except Exception as e:
            # the course itself is still removed
            logger.warning(f"Failed to delete tasks for course {course_id}: {e}")

        result = await self.courses.delete_one({**_course_filter(course_id), "user_id": user_id})
        return result.deleted_count > 0

    async def load_workload_tasks(self, user_id: str) -> list[WorkloadTask]:
        """All of a user's tasks, ordered by deadline, ready for the workload views."""
        cursor = self.tasks.find({"user_id": user_id}).sort([("deadline", ASCENDING)])
        docs = await cursor.to_list(length=None)
        return [WorkloadTask.model_validate(d) for d in docs]


def get_course_task_service(db: Optional[AsyncIOMotorDatabase] = None) -> CourseTaskService:
    """Get course task service instance with database connection"""
    if db is None:
        db = get_db()
    return CourseTaskService(db)
