from sqlalchemy import func, Index
from ..extensions import db
from .enums import item_type_enum, item_status_enum, matching_status_enum
from .types import BigIntId


class Item(db.Model):
    """A lost or found report.

    Lost reports carry ``matching_status``; found reports carry the
    ``status`` that excludes them from matching once claimed.
    """

    __tablename__ = "items"

    id = db.Column(BigIntId, primary_key=True)
    reporter_user_id = db.Column(BigIntId, db.ForeignKey("users.id", ondelete="SET NULL"))
    type = db.Column(item_type_enum, nullable=False)
    category = db.Column(db.String(80), nullable=False)
    brand = db.Column(db.String(120))
    model = db.Column(db.String(120))
    color = db.Column(db.String(60))
    description = db.Column(db.Text, nullable=False, default="")
    # Date lost for lost reports, date found for found reports
    occurred_on = db.Column(db.Date)
    location = db.Column(db.String(200))
    status = db.Column(item_status_enum, nullable=False, default="active", server_default="active")
    matching_status = db.Column(matching_status_enum)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    reporter = db.relationship("User", back_populates="reported_items", foreign_keys=[reporter_user_id])
    images = db.relationship(
        "ItemImage",
        back_populates="item",
        order_by="ItemImage.position",
        cascade="all, delete-orphan",
    )
    lost_matches = db.relationship(
        "Match",
        back_populates="lost_item",
        foreign_keys="Match.lost_item_id",
        cascade="all, delete-orphan",
    )
    found_matches = db.relationship(
        "Match",
        back_populates="found_item",
        foreign_keys="Match.found_item_id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_items_type_status", "type", "status"),
        Index("idx_items_occurred_on", "occurred_on"),
        Index("idx_items_created_at", "created_at"),
    )

    @property
    def is_lost(self) -> bool:
        return self.type == "lost"


class ItemImage(db.Model):
    __tablename__ = "item_images"

    id = db.Column(BigIntId, primary_key=True)
    item_id = db.Column(BigIntId, db.ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    path = db.Column(db.String(512), nullable=False)
    bucket_id = db.Column(db.String(120))
    original_filename = db.Column(db.String(255))
    mime_type = db.Column(db.String(100))
    size = db.Column(db.Integer)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    item = db.relationship("Item", back_populates="images")

    __table_args__ = (
        Index("idx_item_images_item", "item_id", "position"),
    )
