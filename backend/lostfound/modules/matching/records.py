from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class ImageRef:
    path: str
    bucket_id: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None


@dataclass(frozen=True)
class ItemFacts:
    """Detached snapshot of the fields the scorers read from an item."""

    id: int
    category: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    description: str = ""
    occurred_on: Optional[date] = None
    location: Optional[str] = None
    images: Tuple[ImageRef, ...] = field(default_factory=tuple)

    @property
    def primary_image(self) -> Optional[ImageRef]:
        return self.images[0] if self.images else None

    @classmethod
    def from_item(cls, item) -> "ItemFacts":
        occurred = item.occurred_on
        if isinstance(occurred, datetime):
            occurred = occurred.date()
        return cls(
            id=item.id,
            category=item.category,
            brand=item.brand,
            model=item.model,
            color=item.color,
            description=item.description or "",
            occurred_on=occurred,
            location=item.location,
            images=tuple(
                ImageRef(path=img.path, bucket_id=img.bucket_id, mime_type=img.mime_type, size=img.size)
                for img in item.images
            ),
        )


@dataclass
class MatchCandidate:
    found: ItemFacts
    metadata_score: float
    visual_score: Optional[float]
    final_score: float
    model_mismatch: bool = False
