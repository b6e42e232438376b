from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ...integrations.vision.client import ImageAnnotation, VisionAPIError
from .similarity import jaccard, rgb_similarity

logger = logging.getLogger(__name__)

ENTITY_WEIGHT = 0.4
LABEL_WEIGHT = 0.4
COLOR_WEIGHT = 0.2
TOP_COLORS = 3


def _descriptions(entries) -> set:
    return {e.description.lower() for e in entries if e.description}


def visual_similarity(lost: ImageAnnotation, found: ImageAnnotation) -> float:
    """Weighted average of entity, label and colour similarity.

    A signal only counts when both annotations carry it; 0.0 when none do.
    """
    total = 0.0
    weights = 0.0

    if lost.web_entities and found.web_entities:
        total += ENTITY_WEIGHT * jaccard(_descriptions(lost.web_entities), _descriptions(found.web_entities))
        weights += ENTITY_WEIGHT

    if lost.labels and found.labels:
        total += LABEL_WEIGHT * jaccard(_descriptions(lost.labels), _descriptions(found.labels))
        weights += LABEL_WEIGHT

    if lost.dominant_colors and found.dominant_colors:
        best = 0.0
        for a in lost.dominant_colors[:TOP_COLORS]:
            for b in found.dominant_colors[:TOP_COLORS]:
                best = max(best, rgb_similarity((a.red, a.green, a.blue), (b.red, b.green, b.blue)))
        total += COLOR_WEIGHT * best
        weights += COLOR_WEIGHT

    return total / weights if weights > 0 else 0.0


class AnnotationCache:
    """Image URL -> annotation, with a per-entry TTL in seconds.

    Owned by the application and handed to each scorer; a TTL of 0 disables it.
    Expired entries are swept on every write and the oldest ones are dropped
    once ``max_entries`` is reached.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic, max_entries: int = 1024):
        self.ttl = ttl
        self.max_entries = max(1, int(max_entries))
        self._clock = clock
        self._entries: Dict[str, Tuple[float, ImageAnnotation]] = {}
        self._lock = threading.Lock()

    def get(self, url: str) -> Optional[ImageAnnotation]:
        if self.ttl <= 0:
            return None
        with self._lock:
            entry = self._entries.get(url)
            if entry is None:
                return None
            expires_at, annotation = entry
            if expires_at <= self._clock():
                del self._entries[url]
                return None
            return annotation

    def set(self, url: str, annotation: ImageAnnotation) -> None:
        if self.ttl <= 0:
            return
        with self._lock:
            now = self._clock()
            for key in [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]:
                del self._entries[key]
            self._entries.pop(url, None)
            # Insertion order is expiry order since the TTL is fixed
            while len(self._entries) >= self.max_entries:
                del self._entries[next(iter(self._entries))]
            self._entries[url] = (now + self.ttl, annotation)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class VisualScorer:
    """Annotates images through a vision client and scores found images against a lost one.

    Annotation failures are logged and reported as ``None`` so callers fall back to metadata.
    """

    def __init__(self, client, cache: Optional[AnnotationCache] = None, max_workers: int = 1):
        self.client = client
        self.cache = cache
        self.max_workers = max(1, int(max_workers or 1))

    def annotate(self, url: str) -> Optional[ImageAnnotation]:
        if self.cache is not None:
            cached = self.cache.get(url)
            if cached is not None:
                return cached
        try:
            annotation = self.client.annotate(url)
        except VisionAPIError as e:
            logger.warning("Image annotation failed for %s: %s", url, e)
            return None
        if self.cache is not None:
            self.cache.set(url, annotation)
        return annotation

    def score(self, lost: ImageAnnotation, url: str) -> Optional[float]:
        annotation = self.annotate(url)
        if annotation is None:
            return None
        return visual_similarity(lost, annotation)

    def score_many(self, lost: ImageAnnotation, urls: Sequence[str]) -> List[Optional[float]]:
        """Scores in the same order as ``urls`` regardless of completion order."""
        if self.max_workers == 1 or len(urls) <= 1:
            return [self.score(lost, url) for url in urls]
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="vision") as pool:
            return list(pool.map(lambda u: self.score(lost, u), urls))
