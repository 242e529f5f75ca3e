from __future__ import annotations

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from studyplanner.config import settings

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None


def get_client() -> AsyncIOMotorClient:
    if _client is None:
        raise RuntimeError("MongoDB client is not initialized; call connect_to_mongo() first")
    return _client


def get_db(db_name: Optional[str] = None) -> AsyncIOMotorDatabase:
    return get_client()[db_name or settings.mongodb_db_name]


async def connect_to_mongo() -> AsyncIOMotorClient:
    """Create the shared motor client once; later calls reuse it."""
    global _client
    if _client is not None:
        return _client

    # tz_aware so stored deadlines come back as UTC-aware datetimes
    _client = AsyncIOMotorClient(
        settings.mongodb_url,
        serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        uuidRepresentation="standard",
        tz_aware=True,
    )
    logger.info("Connected to MongoDB database %s", settings.mongodb_db_name)
    if settings.regeneration_use_transaction:
        logger.info("Course task regeneration runs in transactions; a replica set is required")
    return _client


async def close_mongo_connection() -> None:
    global _client
    if _client is None:
        return

    _client.close()
    _client = None
    logger.info("MongoDB connection closed")


async def ensure_mongo_indexes() -> None:
    courses_collection = get_db()["courses"]
    tasks_collection = get_db()["tasks"]

    await courses_collection.create_index(
        [("user_id", ASCENDING), ("created_at", ASCENDING)],
        name="idx_courses_user_created_at",
    )
    await tasks_collection.create_index(
        [("course_id", ASCENDING), ("user_id", ASCENDING)],
        name="idx_tasks_course_user",
    )
    await tasks_collection.create_index(
        [("user_id", ASCENDING), ("deadline", ASCENDING)],
        name="idx_tasks_user_deadline",
    )
