from sqlalchemy import String
from sqlalchemy.dialects.postgresql import ENUM

# Postgres ENUM types mapped for SQLAlchemy. These assume the types already exist in the DB.
# Set create_type=False to avoid SQLAlchemy trying to create them automatically.
# The SQLite variant keeps the models usable against an in-memory database.


def _pg_enum(*values: str, name: str):
    return ENUM(*values, name=name, create_type=False).with_variant(String(20), "sqlite")


ITEM_TYPES = ("lost", "found")
ITEM_STATUSES = ("active", "claimed", "returned", "archived")
MATCHING_STATUSES = ("processing", "completed", "failed")
MATCH_STATUSES = ("pending", "confirmed", "rejected")

role_enum = _pg_enum("student", "admin", name="role_enum")
item_type_enum = _pg_enum(*ITEM_TYPES, name="item_type_enum")
item_status_enum = _pg_enum(*ITEM_STATUSES, name="item_status_enum")
# NULL means matching has never run for the item
matching_status_enum = _pg_enum(*MATCHING_STATUSES, name="matching_status_enum")
match_status_enum = _pg_enum(*MATCH_STATUSES, name="match_status_enum")
notification_channel_enum = _pg_enum("email", "push", "inapp", name="notification_channel_enum")
notification_status_enum = _pg_enum("queued", "sent", "failed", "read", name="notification_status_enum")
