# services/progress_service.py
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.database import Database

from models.stroke_validation import CharacterTemplate, ValidationResult
from services.db_service import get_db

logger = logging.getLogger(__name__)

LEARNED = "LEARNED"
IN_PROGRESS = "IN_PROGRESS"

def record_attempt(user_id: str, template: CharacterTemplate, result: ValidationResult,
                   time_spent: float = 0.0, db: Optional[Database] = None) -> Dict[str, Any]:
    """
    Store one scored attempt and update the learner's progress on that character.

    A character stays LEARNED once any attempt has passed.
    """
    if db is None:
        db = get_db()
    now = datetime.utcnow()

    db["stroke_attempts"].insert_one({
        "user_id": user_id,
        "template_id": template.id,
        "character": template.character,
        "accuracy": result.accuracy,
        "grade": result.grade.value,
        "passed": result.passed,
        "deviations": [d.model_dump(by_alias=True) for d in result.deviations or []],
        "time_spent": time_spent,
        "created_at": now,
    })

    key = {"user_id": user_id, "template_id": template.id}
    # status is only ever raised to LEARNED, never written back down
    db["character_progress"].update_one(
        key,
        {
            "$set": {
                "character": template.character,
                "last_accuracy": result.accuracy,
                "last_attempt": now,
            },
            "$setOnInsert": {"status": IN_PROGRESS},
            "$inc": {"attempts": 1, "time_spent": time_spent},
            "$max": {"best_accuracy": result.accuracy},
        },
        upsert=True,
    )
    if result.passed:
        db["character_progress"].update_one(key, {"$set": {"status": LEARNED}})

    progress = db["character_progress"].find_one(key, {"_id": 0})
    logger.info("Recorded attempt for user %s on %s: %.2f (%s)",
                user_id, template.id, result.accuracy, progress["status"])
    return progress

def get_attempt_history(user_id: str, template_id: str, limit: int = 20,
                        db: Optional[Database] = None) -> List[Dict[str, Any]]:
    if db is None:
        db = get_db()
    cursor = (
        db["stroke_attempts"]
        .find({"user_id": user_id, "template_id": template_id}, {"_id": 0})
        .sort("created_at", DESCENDING)
        .limit(limit)
    )
    return list(cursor)

def get_progress_summary(user_id: str, db: Optional[Database] = None) -> Dict[str, Any]:
    if db is None:
        db = get_db()
    entries = list(db["character_progress"].find({"user_id": user_id}, {"_id": 0}).sort("template_id", 1))
    counts = {LEARNED: 0, IN_PROGRESS: 0}
    for entry in entries:
        counts[entry["status"]] = counts.get(entry["status"], 0) + 1
    return {
        "user_id": user_id,
        "learned": counts[LEARNED],
        "in_progress": counts[IN_PROGRESS],
        "total": len(entries),
        "characters": entries,
    }
