# models/stroke_validation.py

from enum import Enum
from typing import List, Optional, Sequence
from pydantic import BaseModel, Field

class Point(BaseModel):
    x: float
    y: float

    model_config = {"frozen": True, "allow_inf_nan": False}

class Stroke(BaseModel):
    """One pen-down to pen-up motion, points in drawing order."""
    points: List[Point]
    timestamp: float = 0.0

    model_config = {"frozen": True}

class Bounds(BaseModel):
    min_x: float = Field(0.0, alias="minX")
    max_x: float = Field(0.0, alias="maxX")
    min_y: float = Field(0.0, alias="minY")
    max_y: float = Field(0.0, alias="maxY")

    model_config = {"populate_by_name": True, "frozen": True}

    @classmethod
    def of(cls, strokes: Sequence[Sequence[Point]]) -> "Bounds":
        points = [p for stroke in strokes for p in stroke]
        if not points:
            return cls()
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min_x=min(xs), max_x=max(xs), min_y=min(ys), max_y=max(ys))

class CharacterTemplate(BaseModel):
    """Reference strokes for one glyph, in the order they should be drawn."""
    id: str
    character: str
    strokes: List[List[Point]]
    bounds: Bounds

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "id": "char-a",
                "character": "A",
                "strokes": [
                    [{"x": 0.0, "y": 0.0}, {"x": 10.0, "y": 10.0}]
                ],
                "bounds": {"minX": 0.0, "maxX": 10.0, "minY": 0.0, "maxY": 10.0}
            }
        }
    }

    @classmethod
    def from_strokes(cls, id: str, character: str, strokes: Sequence[Sequence[Point]]) -> "CharacterTemplate":
        strokes = [list(stroke) for stroke in strokes]
        return cls(id=id, character=character, strokes=strokes, bounds=Bounds.of(strokes))

class NormalizedPath(BaseModel):
    points: List[Point]
    center: Point
    scale: float

class Grade(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    RETRY = "retry"

class Deviation(BaseModel):
    stroke_index: int = Field(..., alias="strokeIndex", ge=0)
    issue: str

    model_config = {"populate_by_name": True, "frozen": True}

class StrokeScore(BaseModel):
    """Score of one attempt stroke against its template stroke."""
    accuracy: float
    deviation: float
    hausdorff: float
    issue: Optional[str] = None

class ValidationResult(BaseModel):
    accuracy: float = Field(..., ge=0, le=100)
    passed: bool
    grade: Grade
    feedback: str
    deviations: Optional[List[Deviation]] = None  # None when nothing was flagged

    model_config = {"frozen": True}

class ScoringOptions(BaseModel):
    """Tunable constants for stroke scoring. Thresholds are on the 0-100 accuracy scale."""
    resample_points: int = Field(64, ge=2)
    passing_threshold: float = 60.0
    good_threshold: float = 75.0
    excellent_threshold: float = 90.0
    flag_threshold: float = 60.0
    max_deviation: float = Field(1.0, gt=0)
    simplify_tolerance: float = 0.0  # Douglas-Peucker tolerance in normalized units, 0 disables
    basic_expected_length: float = Field(1000.0, gt=0)

# --- Request bodies ---

class TemplateCreate(BaseModel):
    id: str
    character: str
    strokes: List[List[Point]]

    def to_template(self) -> CharacterTemplate:
        return CharacterTemplate.from_strokes(self.id, self.character, self.strokes)

class ValidateRequest(BaseModel):
    template_id: str = Field(..., alias="templateId")
    strokes: List[Stroke]
    user_id: Optional[str] = Field(None, alias="userId")
    time_spent: float = Field(0.0, alias="timeSpent", ge=0)

    model_config = {"populate_by_name": True}

class InlineValidateRequest(BaseModel):
    template: TemplateCreate
    strokes: List[Stroke]

class NormalizeRequest(BaseModel):
    points: List[Point]
