"""Matching engine: scores one lost item against the found-item pool.

Run lifecycle (``Item.matching_status``)::

    NULL -> processing -> completed | failed

``processing`` is committed before any scoring so an interrupted run stays
visible. Fatal errors (missing lost item, fetch or insert failures) mark the
run ``failed`` on a best-effort basis and propagate to the caller; failures of
individual image annotations only reduce that candidate to metadata scoring.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from flask import current_app

from ...integrations.storage.urls import public_object_url
from ...integrations.vision.client import build_client
from ...models.match import Match
from . import store
from .policy import MatchingPolicy, evaluate, select_top
from .records import ImageRef, ItemFacts, MatchCandidate
from .visual import AnnotationCache, VisualScorer

logger = logging.getLogger(__name__)

MSG_NO_IMAGES = "No images to match"
MSG_NO_CANDIDATES = "No found items to match"
MSG_COMPLETED = "Matching completed successfully"


@dataclass
class MatchRunResult:
    lost_item_id: int
    message: str
    matches: List[Match] = field(default_factory=list)
    candidates: List[MatchCandidate] = field(default_factory=list)

    @property
    def matches_found(self) -> int:
        return len(self.matches)


def annotation_cache(app) -> AnnotationCache:
    """The app-wide annotation cache, created on first use."""
    cache = app.extensions.get("annotation_cache")
    if cache is None:
        cache = AnnotationCache(
            ttl=float(app.config.get("VISION_CACHE_TTL", 0)),
            max_entries=int(app.config.get("VISION_CACHE_MAX_ENTRIES", 1024)),
        )
        app.extensions["annotation_cache"] = cache
    return cache


class MatchingEngine:
    def __init__(self, policy: MatchingPolicy | None = None, scorer: VisualScorer | None = None, *, storage_base: str | None = None):
        self.policy = policy or MatchingPolicy()
        self.scorer = scorer
        self.storage_base = storage_base

    @classmethod
    def from_app(cls, app=None) -> "MatchingEngine":
        app = app or current_app._get_current_object()
        cfg = app.config
        policy = MatchingPolicy.from_config(cfg)
        storage_base = cfg.get("STORAGE_PUBLIC_URL_BASE")
        scorer = None
        client = build_client()
        if client is None:
            logger.info("Vision API key not set; matching on metadata only")
        elif not storage_base:
            logger.warning("STORAGE_PUBLIC_URL_BASE not set; image matching disabled")
        else:
            scorer = VisualScorer(
                client,
                cache=annotation_cache(app),
                max_workers=int(cfg.get("VISION_MAX_WORKERS", 1)),
            )
        return cls(policy, scorer, storage_base=storage_base)

    def image_url(self, ref: ImageRef) -> str:
        return public_object_url(ref.path, ref.bucket_id, base=self.storage_base)

    def run(self, lost_item_id: int) -> MatchRunResult:
        store.set_matching_status(lost_item_id, "processing")
        try:
            return self._run(lost_item_id)
        except Exception:
            store.mark_failed(lost_item_id)
            raise

    def _run(self, lost_item_id: int) -> MatchRunResult:
        lost = store.load_lost_item(lost_item_id)

        if not lost.images:
            logger.info("Lost item %s has no images, skipping matching", lost_item_id)
            store.set_matching_status(lost_item_id, "completed")
            return MatchRunResult(lost_item_id, MSG_NO_IMAGES)

        pool = store.load_found_pool()
        if not pool:
            logger.info("No found items with images to compare against")
            store.set_matching_status(lost_item_id, "completed")
            return MatchRunResult(lost_item_id, MSG_NO_CANDIDATES)

        logger.info("Matching lost item %s against %d found items", lost_item_id, len(pool))
        candidates = self.score_pool(lost, pool)
        ranked = select_top(candidates, self.policy)
        matches = store.save_matches(lost_item_id, ranked)
        logger.info("Found %d potential matches for lost item %s", len(matches), lost_item_id)
        return MatchRunResult(lost_item_id, MSG_COMPLETED, matches=matches, candidates=candidates)

    def score_pool(self, lost: ItemFacts, pool: List[ItemFacts]) -> List[MatchCandidate]:
        visual: List[Optional[float]] = [None] * len(pool)
        lost_annotation = None
        if self.scorer is not None and lost.primary_image is not None:
            lost_annotation = self.scorer.annotate(self.image_url(lost.primary_image))
            if lost_annotation is not None and lost_annotation.is_empty:
                lost_annotation = None
        if lost_annotation is not None:
            # URLs are built here, not in worker threads
            urls = [self.image_url(found.primary_image) for found in pool]
            visual = self.scorer.score_many(lost_annotation, urls)
        return [evaluate(lost, found, score, self.policy) for found, score in zip(pool, visual)]
