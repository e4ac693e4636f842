# services/stroke_scorer.py
"""
Stroke scoring for character practice.

Compares a learner's strokes against a CharacterTemplate. Both sides are
normalized (centroid moved to the origin, max radius scaled to 1) and
resampled by arc length, so position, size and drawing speed do not affect
the score. Stroke i of the attempt is always compared with stroke i of the
template.
"""
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial.distance import cdist

from config.settings import settings
from models.stroke_validation import (
    CharacterTemplate,
    Deviation,
    Grade,
    NormalizedPath,
    Point,
    ScoringOptions,
    Stroke,
    StrokeScore,
    ValidationResult,
)

logger = logging.getLogger(__name__)

_EPS = 1e-12

NO_INPUT_FEEDBACK = "Please draw the character to continue."

ISSUE_NO_POINTS = "stroke has no points"
ISSUE_TEMPLATE_NO_POINTS = "reference stroke has no points"
ISSUE_WRONG_DIRECTION = "stroke drawn in the wrong direction"
ISSUE_SHAPE_MISMATCH = "stroke shape does not match the reference"
ISSUE_TOO_FAR = "stroke too far from reference shape"
ISSUE_MISSING = "missing stroke"
ISSUE_EXTRA = "extra stroke"

# (grade, any strokes flagged) -> feedback
FEEDBACK = {
    (Grade.EXCELLENT, False): "Excellent! Your strokes are very accurate.",
    (Grade.EXCELLENT, True): "Excellent! Just check the highlighted stroke.",
    (Grade.GOOD, False): "Good job! Your character looks great.",
    (Grade.GOOD, True): "Good job! Check the highlighted strokes.",
    (Grade.ACCEPTABLE, False): "Well done! You can move to the next character.",
    (Grade.ACCEPTABLE, True): "Close! Check the highlighted strokes.",
    (Grade.RETRY, False): "Try again. Follow the guide lines more carefully.",
    (Grade.RETRY, True): "Try again, focus on the shape of the highlighted strokes.",
}


class InvalidInputError(ValueError):
    """A stroke that cannot be scored at all, e.g. one with no points."""


def default_options() -> ScoringOptions:
    return ScoringOptions(
        resample_points=settings.RESAMPLE_POINTS,
        passing_threshold=settings.PASSING_THRESHOLD,
        good_threshold=settings.GOOD_THRESHOLD,
        excellent_threshold=settings.EXCELLENT_THRESHOLD,
        flag_threshold=settings.FLAG_THRESHOLD,
        max_deviation=settings.MAX_DEVIATION,
    )


# ===============================
# Geometry
# ===============================

def _as_array(points: Sequence[Point]) -> np.ndarray:
    return np.array([[p.x, p.y] for p in points], dtype=float).reshape(-1, 2)


def _to_points(arr: np.ndarray) -> List[Point]:
    return [Point(x=float(x), y=float(y)) for x, y in arr]


def _normalize_array(arr: np.ndarray) -> Tuple[np.ndarray, np.ndarray, float]:
    if len(arr) == 0:
        raise InvalidInputError("cannot normalize a stroke with no points")
    center = arr.mean(axis=0)
    centered = arr - center
    scale = float(np.max(np.linalg.norm(centered, axis=1)))
    if scale < _EPS:
        # single point (or all points equal): already normalized
        scale = 1.0
    return centered / scale, center, scale


def normalize(points: Sequence[Point]) -> NormalizedPath:
    """
    Remove translation and size from a point sequence.

    The centroid becomes the origin and the point furthest from it ends up at
    distance 1. Raises InvalidInputError for an empty sequence.
    """
    normalized, center, scale = _normalize_array(_as_array(points))
    return NormalizedPath(
        points=_to_points(normalized),
        center=Point(x=float(center[0]), y=float(center[1])),
        scale=scale,
    )


def _path_length_array(arr: np.ndarray) -> float:
    if len(arr) < 2:
        return 0.0
    return float(np.sum(np.linalg.norm(np.diff(arr, axis=0), axis=1)))


def path_length(points: Sequence[Point]) -> float:
    return _path_length_array(_as_array(points))


def _resample_array(arr: np.ndarray, n: int) -> np.ndarray:
    if len(arr) == 0:
        raise InvalidInputError("cannot resample a stroke with no points")
    if len(arr) > 1:
        seg = np.linalg.norm(np.diff(arr, axis=0), axis=1)
        # np.interp needs strictly increasing arc positions
        arr = arr[np.concatenate([[True], seg > _EPS])]
    if len(arr) == 1:
        return np.repeat(arr[:1], n, axis=0)

    cum = np.concatenate([[0.0], np.cumsum(np.linalg.norm(np.diff(arr, axis=0), axis=1))])
    targets = np.linspace(0.0, cum[-1], n)
    return np.column_stack([
        np.interp(targets, cum, arr[:, 0]),
        np.interp(targets, cum, arr[:, 1]),
    ])


def resample(points: Sequence[Point], n: int) -> List[Point]:
    """Resample a polyline to exactly n points spaced evenly by arc length."""
    return _to_points(_resample_array(_as_array(points), n))


def _simplify_array(arr: np.ndarray, tolerance: float) -> np.ndarray:
    if len(arr) <= 2:
        return arr
    start, end = arr[0], arr[-1]
    line = end - start
    norm = float(np.hypot(line[0], line[1]))
    rel = arr[1:-1] - start
    if norm < _EPS:
        dists = np.linalg.norm(rel, axis=1)
    else:
        dists = np.abs(line[0] * rel[:, 1] - line[1] * rel[:, 0]) / norm

    idx = int(np.argmax(dists))
    if dists[idx] > tolerance:
        split = idx + 1
        left = _simplify_array(arr[:split + 1], tolerance)
        right = _simplify_array(arr[split:], tolerance)
        return np.vstack([left[:-1], right])
    return np.vstack([start, end])


def simplify_path(points: Sequence[Point], tolerance: float) -> List[Point]:
    """Douglas-Peucker simplification. Endpoints are always kept."""
    return _to_points(_simplify_array(_as_array(points), tolerance))


def _hausdorff_array(a: np.ndarray, b: np.ndarray) -> float:
    d = cdist(a, b, metric="euclidean")
    return float(max(d.min(axis=1).max(), d.min(axis=0).max()))


def hausdorff_distance(a: Sequence[Point], b: Sequence[Point]) -> float:
    if not a or not b:
        raise InvalidInputError("hausdorff distance needs two non-empty paths")
    return _hausdorff_array(_as_array(a), _as_array(b))


def _prepare(points: Sequence[Point], options: ScoringOptions) -> np.ndarray:
    normalized, _, _ = _normalize_array(_as_array(points))
    if options.simplify_tolerance > 0:
        normalized = _simplify_array(normalized, options.simplify_tolerance)
    return _resample_array(normalized, options.resample_points)


def stroke_deviation(attempt: Sequence[Point], template: Sequence[Point], n: int = 64) -> float:
    """Mean pointwise distance between the normalized, resampled paths."""
    a = _resample_array(_normalize_array(_as_array(attempt))[0], n)
    b = _resample_array(_normalize_array(_as_array(template))[0], n)
    return float(np.mean(np.linalg.norm(a - b, axis=1)))


# ===============================
# Scoring
# ===============================

def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(value, high))


def _contribution(deviation: float, options: ScoringOptions) -> float:
    return _clamp(100.0 * (1.0 - deviation / options.max_deviation))


def score_stroke(attempt: Sequence[Point], template: Sequence[Point],
                 options: Optional[ScoringOptions] = None) -> StrokeScore:
    """
    Score one attempt stroke against its template stroke.

    Raises InvalidInputError if the attempt stroke has no points; an empty
    template stroke is reported as an issue on a zero score instead.
    """
    options = options or default_options()
    a = _prepare(attempt, options)
    if len(template) == 0:
        return StrokeScore(accuracy=0.0, deviation=float("inf"), hausdorff=float("inf"),
                           issue=ISSUE_TEMPLATE_NO_POINTS)
    b = _prepare(template, options)

    deviation = float(np.mean(np.linalg.norm(a - b, axis=1)))
    hausdorff = _hausdorff_array(a, b)
    accuracy = _contribution(deviation, options)

    issue = None
    if accuracy < options.flag_threshold:
        reversed_deviation = float(np.mean(np.linalg.norm(a[::-1] - b, axis=1)))
        if _contribution(reversed_deviation, options) >= options.flag_threshold:
            issue = ISSUE_WRONG_DIRECTION
        elif hausdorff > options.max_deviation:
            issue = ISSUE_SHAPE_MISMATCH
        else:
            issue = ISSUE_TOO_FAR

    logger.debug("stroke deviation=%.4f hausdorff=%.4f accuracy=%.2f", deviation, hausdorff, accuracy)
    return StrokeScore(accuracy=accuracy, deviation=deviation, hausdorff=hausdorff, issue=issue)


def grade_for(accuracy: float, options: Optional[ScoringOptions] = None) -> Grade:
    options = options or default_options()
    if accuracy >= options.excellent_threshold:
        return Grade.EXCELLENT
    if accuracy >= options.good_threshold:
        return Grade.GOOD
    if accuracy >= options.passing_threshold:
        return Grade.ACCEPTABLE
    return Grade.RETRY


def _no_input_result() -> ValidationResult:
    return ValidationResult(accuracy=0.0, passed=False, grade=Grade.RETRY, feedback=NO_INPUT_FEEDBACK)


def _result(accuracy: float, deviations: List[Deviation], options: ScoringOptions,
            feedback: Optional[str] = None) -> ValidationResult:
    accuracy = round(_clamp(accuracy), 2)
    grade = grade_for(accuracy, options)
    return ValidationResult(
        accuracy=accuracy,
        passed=accuracy >= options.passing_threshold,
        grade=grade,
        feedback=feedback or FEEDBACK[(grade, bool(deviations))],
        deviations=deviations or None,
    )


def _plural(count: int) -> str:
    return f"{count} stroke" if count == 1 else f"{count} strokes"


def validate(attempt_strokes: Sequence[Stroke], template: CharacterTemplate,
             options: Optional[ScoringOptions] = None) -> ValidationResult:
    """
    Grade a learner's attempt against a character template.

    Always returns a result. A stroke-count mismatch scores the extra or
    missing strokes as 0, caps accuracy below the passing threshold and
    reports each unmatched stroke as a deviation.
    """
    options = options or default_options()
    if not attempt_strokes:
        return _no_input_result()

    drawn = len(attempt_strokes)
    expected = len(template.strokes)
    matched = min(drawn, expected)

    contributions = []
    deviations = []
    for i in range(matched):
        try:
            score = score_stroke(attempt_strokes[i].points, template.strokes[i], options)
        except InvalidInputError:
            score = StrokeScore(accuracy=0.0, deviation=float("inf"), hausdorff=float("inf"),
                                issue=ISSUE_NO_POINTS)
        contributions.append(score.accuracy)
        if score.issue:
            deviations.append(Deviation(stroke_index=i, issue=score.issue))

    unmatched_issue = ISSUE_EXTRA if drawn > expected else ISSUE_MISSING
    for i in range(matched, max(drawn, expected)):
        contributions.append(0.0)
        deviations.append(Deviation(stroke_index=i, issue=unmatched_issue))

    accuracy = sum(contributions) / len(contributions)
    feedback = None
    if drawn != expected:
        accuracy = min(accuracy, options.passing_threshold - 1)
        feedback = (f"This character has {_plural(expected)} but you drew {drawn}. "
                    "Try again, matching the stroke count.")

    result = _result(accuracy, deviations, options, feedback)
    logger.debug("validated %s: accuracy=%.2f grade=%s", template.id, result.accuracy, result.grade.value)
    return result


def validate_basic(attempt_strokes: Sequence[Stroke],
                   options: Optional[ScoringOptions] = None) -> ValidationResult:
    """
    Presence check for characters that have no template yet.

    Rewards total ink length (up to options.basic_expected_length in input
    units) plus 10 points per stroke, capped at 20.
    """
    options = options or default_options()
    if not attempt_strokes:
        return _no_input_result()

    total_length = sum(path_length(stroke.points) for stroke in attempt_strokes)
    length_score = min(100.0, total_length / options.basic_expected_length * 100.0)
    stroke_bonus = min(20.0, len(attempt_strokes) * 10.0)

    deviations = [
        Deviation(stroke_index=i, issue=ISSUE_NO_POINTS)
        for i, stroke in enumerate(attempt_strokes) if not stroke.points
    ]
    return _result(length_score + stroke_bonus, deviations, options)
