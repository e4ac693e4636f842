# routes/progress_routes.py

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database
from typing import Dict, Any

from services.db_service import get_db
from services.progress_service import get_attempt_history, get_progress_summary

router = APIRouter(prefix="/progress", tags=["progress"])

@router.get("/{user_id}")
async def progress_summary(user_id: str, db: Database = Depends(get_db)) -> Dict[str, Any]:
    return {"ok": True, **get_progress_summary(user_id, db=db)}

@router.get("/{user_id}/{template_id}/history")
async def attempt_history(
    user_id: str,
    template_id: str,
    limit: int = Query(20, ge=1, le=100),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    """Most recent attempts first."""
    attempts = get_attempt_history(user_id, template_id, limit=limit, db=db)
    return {"ok": True, "attempts": attempts}
