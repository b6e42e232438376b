from __future__ import annotations

from datetime import datetime
from ..extensions import db
from .types import BigIntId


class AppSetting(db.Model):
    """Key/value overrides editable at runtime (e.g. ``matching.threshold``)."""

    __tablename__ = "app_settings"

    id = db.Column(BigIntId, primary_key=True)
    key = db.Column(db.String(200), nullable=False, unique=True, index=True)
    value_text = db.Column(db.Text, nullable=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    @staticmethod
    def get(key: str, default: str | None = None) -> str | None:
        row = AppSetting.query.filter_by(key=key).first()
        return row.value_text if row and row.value_text is not None else default

    @staticmethod
    def set(key: str, value: str | None) -> None:
        row = AppSetting.query.filter_by(key=key).first()
        if row is None:
            row = AppSetting(key=key, value_text=value)
            db.session.add(row)
        else:
            row.value_text = value
        db.session.commit()

    @staticmethod
    def get_float(key: str, default: float) -> float:
        val = AppSetting.get(key, None)
        if val is None:
            return default
        try:
            return float(val)
        except ValueError:
            return default

    @staticmethod
    def get_bool(key: str, default: bool = False) -> bool:
        val = AppSetting.get(key, None)
        if val is None:
            return default
        return str(val).strip().lower() in {"1", "true", "yes", "on"}
