from __future__ import annotations

import logging
from typing import List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from ...extensions import db
from ...models.item import Item
from ...models.match import Match
from .errors import CandidateFetchError, LostItemNotFound, MatchPersistenceError
from .records import ItemFacts, MatchCandidate

logger = logging.getLogger(__name__)


# ---- Candidate fetcher ----

def load_lost_item(lost_item_id: int) -> ItemFacts:
    try:
        item = (
            Item.query.options(selectinload(Item.images))
            .filter(Item.id == lost_item_id, Item.type == "lost")
            .first()
        )
    except SQLAlchemyError as e:
        db.session.rollback()
        raise CandidateFetchError(f"Failed to fetch lost item: {e}") from e
    if item is None:
        raise LostItemNotFound(lost_item_id)
    return ItemFacts.from_item(item)


def load_found_pool() -> List[ItemFacts]:
    """Found items that are not claimed and have at least one image, oldest first."""
    try:
        rows = (
            Item.query.options(selectinload(Item.images))
            .filter(Item.type == "found", Item.status != "claimed", Item.images.any())
            .order_by(Item.created_at.asc(), Item.id.asc())
            .all()
        )
    except SQLAlchemyError as e:
        db.session.rollback()
        raise CandidateFetchError(f"Failed to fetch found items: {e}") from e
    return [ItemFacts.from_item(it) for it in rows]


# ---- Status + persistence ----

def set_matching_status(lost_item_id: int, status: str | None) -> None:
    Item.query.filter(Item.id == lost_item_id, Item.type == "lost").update(
        {Item.matching_status: status}, synchronize_session=False
    )
    db.session.commit()


def mark_failed(lost_item_id: int) -> None:
    """Best-effort transition to ``failed``; a failing write is logged, never raised."""
    try:
        db.session.rollback()
        set_matching_status(lost_item_id, "failed")
    except Exception:
        db.session.rollback()
        logger.exception("Failed to update matching status to failed for lost item %s", lost_item_id)


def save_matches(lost_item_id: int, ranked: Sequence[MatchCandidate]) -> List[Match]:
    """Insert ``ranked`` as pending matches and complete the run in one commit."""
    records = [
        Match(
            lost_item_id=lost_item_id,
            found_item_id=c.found.id,
            confidence_score=round(c.final_score, 2),
            status="pending",
        )
        for c in ranked
    ]
    try:
        db.session.add_all(records)
        Item.query.filter(Item.id == lost_item_id, Item.type == "lost").update(
            {Item.matching_status: "completed"}, synchronize_session=False
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise MatchPersistenceError(f"Failed to insert matches: {e}") from e
    return records
