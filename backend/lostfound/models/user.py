from sqlalchemy import func
from ..extensions import db
from .enums import role_enum
from .types import BigIntId


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(BigIntId, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    full_name = db.Column(db.String(200))
    role = db.Column(role_enum, nullable=False, default="student", server_default="student")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    reported_items = db.relationship(
        "Item",
        back_populates="reporter",
        foreign_keys="Item.reporter_user_id",
        lazy=True,
    )
    notifications = db.relationship(
        "Notification",
        back_populates="user",
        lazy=True,
        cascade="all, delete-orphan",
    )
