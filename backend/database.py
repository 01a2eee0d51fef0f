import os
import logging
from typing import Any, Dict, Optional, List
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument
from datetime import datetime, timezone
from dotenv import load_dotenv

from schemas import Task

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "task_manager")

TASK_COLLECTION = "task"
COUNTER_COLLECTION = "counters"

logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None
_db: Optional[AsyncIOMotorDatabase] = None

async def get_db() -> AsyncIOMotorDatabase:
    global _client, _db
    if _db is None:
        _client = AsyncIOMotorClient(DATABASE_URL)
        _db = _client[DATABASE_NAME]
    return _db

def close_db() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
    _client = None
    _db = None

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _to_document(task: Task) -> Dict[str, Any]:
    # dates and literals become plain JSON values; BSON has no date-only type
    return task.model_dump(mode="json", exclude={"id"})

def _to_task(doc: Dict[str, Any]) -> Task:
    doc = dict(doc)
    doc["id"] = doc.pop("_id")
    return Task.model_validate(doc)


class MongoTaskStore:
    """
    Task persistence on a MongoDB database.

    Ids are sequential integers handed out by an atomic counter document,
    so ascending _id order is insertion order.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self._db = db

    async def _next_id(self) -> int:
        counter = await self._db[COUNTER_COLLECTION].find_one_and_update(
            {"_id": TASK_COLLECTION},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["seq"])

    async def save(self, task: Task) -> Task:
        now = _utcnow()
        data = _to_document(task)
        task_id = task.id
        if task_id is not None:
            res = await self._db[TASK_COLLECTION].update_one(
                {"_id": task_id}, {"$set": {**data, "updated_at": now}}
            )
            if res.matched_count:
                logger.debug("Overwrote task id=%s", task_id)
            else:
                # only the counter hands out ids; an unknown one is saved as new
                logger.debug("Task id=%s not stored, inserting as new", task_id)
                task_id = None
        if task_id is None:
            task_id = await self._next_id()
            await self._db[TASK_COLLECTION].insert_one(
                {"_id": task_id, **data, "created_at": now, "updated_at": now}
            )
            logger.debug("Inserted task id=%s", task_id)
        saved = await self._db[TASK_COLLECTION].find_one({"_id": task_id})
        if saved is None:
            raise RuntimeError(f"Task {task_id} vanished right after it was written")
        return _to_task(saved)

    async def find_by_id(self, task_id: int) -> Optional[Task]:
        doc = await self._db[TASK_COLLECTION].find_one({"_id": task_id})
        return _to_task(doc) if doc else None

    async def find_all(self) -> List[Task]:
        cursor = self._db[TASK_COLLECTION].find({}, sort=[("_id", 1)])
        items: List[Task] = []
        async for doc in cursor:
            items.append(_to_task(doc))
        return items

    async def delete_by_id(self, task_id: int) -> None:
        res = await self._db[TASK_COLLECTION].delete_one({"_id": task_id})
        logger.debug("Deleted task id=%s count=%s", task_id, res.deleted_count)
