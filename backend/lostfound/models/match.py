from sqlalchemy import func, Index, CheckConstraint
from ..extensions import db
from .enums import match_status_enum
from .types import BigIntId


class Match(db.Model):
    __tablename__ = "matches"

    id = db.Column(BigIntId, primary_key=True)
    lost_item_id = db.Column(BigIntId, db.ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    found_item_id = db.Column(BigIntId, db.ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    confidence_score = db.Column(db.Numeric(3, 2), nullable=False, server_default="0.00")
    status = db.Column(match_status_enum, nullable=False, default="pending", server_default="pending")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    lost_item = db.relationship("Item", foreign_keys=[lost_item_id], back_populates="lost_matches")
    found_item = db.relationship("Item", foreign_keys=[found_item_id], back_populates="found_matches")

    # No unique (lost, found) constraint: each matching run appends its own records.
    __table_args__ = (
        CheckConstraint("confidence_score >= 0 AND confidence_score <= 1", name="ck_matches_confidence_range"),
        Index("idx_matches_lost", "lost_item_id"),
        Index("idx_matches_found", "found_item_id"),
    )
