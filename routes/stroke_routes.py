# routes/stroke_routes.py

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database
from pymongo.errors import PyMongoError
from typing import Dict, Any

from models.stroke_validation import (
    InlineValidateRequest,
    NormalizeRequest,
    TemplateCreate,
    ValidateRequest,
)
from services.db_service import get_db
from services.progress_service import record_attempt
from services.stroke_scorer import normalize, validate, validate_basic
from services.template_service import get_template, list_templates, save_template

router = APIRouter(prefix="/strokes", tags=["strokes"])

@router.get("/templates")
async def templates(db: Database = Depends(get_db)) -> Dict[str, Any]:
    return {
        "ok": True,
        "templates": [t.model_dump(by_alias=True) for t in list_templates(db=db)],
    }

@router.get("/templates/{template_id}")
async def template_detail(template_id: str, db: Database = Depends(get_db)) -> Dict[str, Any]:
    template = get_template(template_id, db=db)
    if template is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return {"ok": True, "template": template.model_dump(by_alias=True)}

@router.post("/templates")
async def create_template(body: TemplateCreate, db: Database = Depends(get_db)) -> Dict[str, Any]:
    """
    Create or replace a character template (admin / seeding).
    Bounds are computed from the submitted strokes.
    """
    try:
        template = save_template(body, db=db)
    except PyMongoError as e:
        raise HTTPException(status_code=500, detail=f"Database error: {e}")
    return {"ok": True, "template": template.model_dump(by_alias=True)}

@router.post("/validate")
async def validate_attempt(body: ValidateRequest, db: Database = Depends(get_db)) -> Dict[str, Any]:
    """
    Score a learner's strokes against a stored template.

    Characters without reference strokes get the basic presence check.
    When userId is given the attempt is recorded in the learner's progress.
    """
    template = get_template(body.template_id, db=db)
    if template is None:
        raise HTTPException(status_code=404, detail="Template not found")

    if template.strokes:
        result = validate(body.strokes, template)
    else:
        result = validate_basic(body.strokes)

    response = {"ok": True, "result": result.model_dump(by_alias=True)}
    if body.user_id:
        try:
            response["progress"] = record_attempt(body.user_id, template, result, body.time_spent, db=db)
        except PyMongoError as e:
            raise HTTPException(status_code=500, detail=f"Failed to save attempt: {e}")
    return response

@router.post("/validate-inline")
async def validate_inline(body: InlineValidateRequest) -> Dict[str, Any]:
    """Score strokes against a template sent with the request. Nothing is stored."""
    template = body.template.to_template()
    if template.strokes:
        result = validate(body.strokes, template)
    else:
        result = validate_basic(body.strokes)
    return {"ok": True, "result": result.model_dump(by_alias=True)}

@router.post("/normalize")
async def normalize_points(body: NormalizeRequest) -> Dict[str, Any]:
    # empty point lists surface as InvalidInputError -> 422 (see main.py)
    return {"ok": True, "path": normalize(body.points).model_dump()}
