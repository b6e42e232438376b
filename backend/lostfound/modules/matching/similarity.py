from __future__ import annotations

import math
from datetime import date
from typing import Dict, Optional, Tuple

from .records import ItemFacts

# ---- Primitives (all return a value in [0, 1]) ----

# (max days apart, score); anything beyond the last step scores DATE_FLOOR
_DATE_STEPS: Tuple[Tuple[int, float], ...] = (
    (0, 1.0),
    (1, 0.9),
    (3, 0.7),
    (7, 0.4),
    (14, 0.2),
)
DATE_FLOOR = 0.05

MAX_RGB_DISTANCE = math.sqrt(3 * 255 ** 2)


def _norm(s: Optional[str]) -> str:
    return (s or "").strip().lower()


def days_between(a: date, b: date) -> int:
    return abs((a - b).days)


def date_proximity(a: date, b: date) -> float:
    diff = days_between(a, b)
    for max_days, score in _DATE_STEPS:
        if diff <= max_days:
            return score
    return DATE_FLOOR


def text_similarity(a: Optional[str], b: Optional[str], partial: float = 0.0) -> float:
    """1.0 on case-insensitive equality, ``partial`` when one contains the other."""
    x, y = _norm(a), _norm(b)
    if not x or not y:
        return 0.0
    if x == y:
        return 1.0
    if x in y or y in x:
        return partial
    return 0.0


def location_similarity(a: Optional[str], b: Optional[str]) -> float:
    x, y = _norm(a), _norm(b)
    if not x or not y:
        return 0.0
    if x == y:
        return 1.0
    if x in y or y in x:
        return 0.7
    # Shared building names, floor numbers etc.
    other = set(y.split())
    common = [w for w in x.split() if len(w) > 2 and w in other]
    if common:
        return min(0.5, 0.2 * len(common))
    return 0.0


def rgb_similarity(a: Tuple[float, float, float], b: Tuple[float, float, float]) -> float:
    dist = math.sqrt(sum((p - q) ** 2 for p, q in zip(a, b)))
    return max(0.0, 1.0 - dist / MAX_RGB_DISTANCE)


def jaccard(a: set, b: set) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


# ---- Metadata scorer ----

# Date and location dominate; brand is near-negligible since many items share mass-market brands.
FIELD_WEIGHTS: Dict[str, float] = {
    "date": 4.0,
    "location": 3.5,
    "model": 2.5,
    "category": 2.0,
    "color": 1.0,
    "brand": 0.3,
}


def field_scores(lost: ItemFacts, found: ItemFacts) -> Dict[str, float]:
    """Per-field similarity for every field present on both sides."""
    out: Dict[str, float] = {}
    if lost.occurred_on and found.occurred_on:
        out["date"] = date_proximity(lost.occurred_on, found.occurred_on)
    if _norm(lost.location) and _norm(found.location):
        out["location"] = location_similarity(lost.location, found.location)
    if _norm(lost.model) and _norm(found.model):
        # Differing models keep their weight and score 0, dragging the average down
        out["model"] = text_similarity(lost.model, found.model, partial=0.6)
    if _norm(lost.category) and _norm(found.category):
        out["category"] = text_similarity(lost.category, found.category)
    if _norm(lost.color) and _norm(found.color):
        out["color"] = text_similarity(lost.color, found.color, partial=0.5)
    if _norm(lost.brand) and _norm(found.brand):
        out["brand"] = text_similarity(lost.brand, found.brand, partial=0.5)
    return out


def metadata_similarity(lost: ItemFacts, found: ItemFacts) -> float:
    scores = field_scores(lost, found)
    total_weight = sum(FIELD_WEIGHTS[k] for k in scores)
    if total_weight <= 0:
        return 0.0
    total = sum(FIELD_WEIGHTS[k] * s for k, s in scores.items())
    return total / total_weight


def has_model_mismatch(a: Optional[str], b: Optional[str]) -> bool:
    """Both models given and neither contains the other."""
    x, y = _norm(a), _norm(b)
    if not x or not y:
        return False
    return x not in y and y not in x
