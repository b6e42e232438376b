from __future__ import annotations

from flask import Blueprint, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.orm import joinedload

from ...extensions import db
from ...models.item import Item
from ...models.match import Match
from ...schemas.match import MatchSchema, MatchStatusUpdateSchema, MatchWithItemsSchema

bp = Blueprint("matches", __name__, url_prefix="/matches")


def _dump(rows, include_items: bool):
    schema = MatchWithItemsSchema(many=True) if include_items else MatchSchema(many=True)
    return schema.dump(rows)


@bp.get("")
def list_matches():
    # Optional filters: lostItemId, foundItemId, status
    q = Match.query
    lost_id = request.args.get("lostItemId")
    found_id = request.args.get("foundItemId")
    status = request.args.get("status")
    include_items = request.args.get("includeItems") in ("1", "true", "yes")
    try:
        limit = int(request.args.get("limit", 200))
    except Exception:
        limit = 200
    if lost_id:
        try:
            q = q.filter(Match.lost_item_id == int(lost_id))
        except ValueError:
            return jsonify({"error": "Invalid lostItemId"}), 400
    if found_id:
        try:
            q = q.filter(Match.found_item_id == int(found_id))
        except ValueError:
            return jsonify({"error": "Invalid foundItemId"}), 400
    if status:
        q = q.filter(Match.status == status)
    if include_items:
        q = q.options(
            joinedload(Match.lost_item).selectinload(Item.images),
            joinedload(Match.found_item).selectinload(Item.images),
        )

    # A lost item's matches are shown best first
    if lost_id:
        q = q.order_by(Match.confidence_score.desc(), Match.created_at.desc(), Match.id.asc())
    else:
        q = q.order_by(Match.created_at.desc(), Match.id.desc())
    rows = q.limit(max(1, min(500, limit))).all()
    return jsonify({"matches": _dump(rows, include_items)})


@bp.patch("/<int:match_id>")
def update_match_status(match_id: int):
    """Confirm or reject a pending match.

    Confirming marks both the lost and the found item as claimed.
    """
    try:
        status = MatchStatusUpdateSchema().load(request.get_json(silent=True) or {})["status"]
    except ValidationError as err:
        return jsonify({"error": "Invalid status", "message": err.messages}), 400
    m = db.session.get(Match, match_id)
    if not m:
        return jsonify({"error": "Match not found"}), 404
    m.status = status
    if status == "confirmed":
        for item in (m.lost_item, m.found_item):
            if item is not None:
                item.status = "claimed"
    db.session.commit()
    return jsonify({"match": MatchSchema().dump(m)})
