# services/template_service.py
import json
import logging
import os
from typing import List, Optional

from pymongo.database import Database

from config.settings import settings
from models.stroke_validation import CharacterTemplate, TemplateCreate
from services.db_service import get_db

logger = logging.getLogger(__name__)

COLLECTION = "character_templates"

def _collection(db: Optional[Database]):
    if db is None:
        db = get_db()
    return db[COLLECTION]

def get_template(template_id: str, db: Optional[Database] = None) -> Optional[CharacterTemplate]:
    doc = _collection(db).find_one({"_id": template_id}, {"_id": 0})
    if not doc:
        return None
    return CharacterTemplate.model_validate(doc)

def list_templates(db: Optional[Database] = None) -> List[CharacterTemplate]:
    cursor = _collection(db).find({}, {"_id": 0}).sort("id", 1)
    return [CharacterTemplate.model_validate(doc) for doc in cursor]

def save_template(template: TemplateCreate, db: Optional[Database] = None) -> CharacterTemplate:
    """Insert or replace a template by id. Bounds are always recomputed from the strokes."""
    character_template = template.to_template()
    doc = character_template.model_dump()
    doc["_id"] = character_template.id
    _collection(db).replace_one({"_id": character_template.id}, doc, upsert=True)
    logger.info("Saved template %s (%d strokes)", character_template.id, len(character_template.strokes))
    return character_template

def seed_templates(path: Optional[str] = None, db: Optional[Database] = None) -> int:
    """
    Load templates from a JSON file and upsert each one.

    The file holds a list of {"id", "character", "strokes": [[{"x", "y"}, ...], ...]}.
    Returns the number of templates written, 0 if the file is missing.
    """
    path = path or settings.TEMPLATES_PATH
    if not os.path.exists(path):
        logger.warning("%s not found, no templates seeded", path)
        return 0

    with open(path, "r", encoding="utf-8") as f:
        entries = json.load(f)

    count = 0
    for entry in entries:
        save_template(TemplateCreate.model_validate(entry), db=db)
        count += 1
    logger.info("Seeded %d templates from %s", count, path)
    return count

if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    seed_templates()
