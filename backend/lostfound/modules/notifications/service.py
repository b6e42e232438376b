from __future__ import annotations

import logging

from ...extensions import db
from ...models.item import Item
from ...models.notification import Notification

logger = logging.getLogger(__name__)


def record_match_notification(lost_item_id: int, match_count: int) -> Notification | None:
    """Queue an in-app notice telling the lost item's reporter how many matches were found."""
    if match_count <= 0:
        return None
    item = Item.query.filter(Item.id == lost_item_id, Item.type == "lost").first()
    if item is None or not item.reporter_user_id:
        logger.info("No reporter to notify for lost item %s", lost_item_id)
        return None
    noun = "match" if match_count == 1 else "matches"
    n = Notification(
        user_id=item.reporter_user_id,
        channel="inapp",
        title="Potential match found",
        body=f"We found {match_count} potential {noun} for your lost {item.category}.",
        payload={"kind": "match", "lostItemId": lost_item_id, "matchCount": match_count},
    )
    db.session.add(n)
    db.session.commit()
    return n
