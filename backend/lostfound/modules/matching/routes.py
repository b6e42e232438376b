from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from marshmallow import ValidationError

from ...schemas.match import MatchRunRequestSchema, MatchSchema
from .engine import MatchingEngine
from .errors import MatchingError

logger = logging.getLogger(__name__)

bp = Blueprint("matching", __name__, url_prefix="/matching")

_request_schema = MatchRunRequestSchema()
_match_schema = MatchSchema(many=True)


def _first_error(err: ValidationError) -> str:
    messages = err.messages
    if isinstance(messages, dict):
        for value in messages.values():
            if isinstance(value, list) and value:
                return str(value[0])
            return str(value)
    return str(messages)


def _notify(lost_item_id: int, match_count: int) -> None:
    if not current_app.config.get("MATCH_NOTIFY_ENABLED") or match_count <= 0:
        return
    try:
        from ...tasks.jobs.notifications import notify_match_results
        notify_match_results.delay(lost_item_id, match_count)
    except Exception:
        # Matches are already stored; a broker outage only loses the notice
        logger.exception("Failed to enqueue match notification for lost item %s", lost_item_id)


@bp.post("/run")
def run_matching():
    """Score a lost item against all eligible found items and store the top matches.

    Body: { lostItemId }
    Returns: { message, matchesFound, matches: [MatchRecord] }
    """
    data = request.get_json(silent=True) or {}
    try:
        lost_item_id = _request_schema.load(data)["lost_item_id"]
    except ValidationError as err:
        return jsonify({"error": _first_error(err)}), 400

    try:
        result = MatchingEngine.from_app().run(lost_item_id)
    except MatchingError as e:
        logger.error("Matching failed for lost item %s: %s", lost_item_id, e)
        return jsonify({"error": "Internal server error", "message": str(e)}), 500
    except Exception as e:
        logger.exception("Error in matching service")
        return jsonify({"error": "Internal server error", "message": str(e) or "Unknown error"}), 500

    _notify(lost_item_id, result.matches_found)
    return jsonify({
        "message": result.message,
        "matchesFound": result.matches_found,
        "matches": _match_schema.dump(result.matches),
    })
