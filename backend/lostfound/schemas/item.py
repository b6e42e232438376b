from flask import current_app
from marshmallow import Schema, fields

from ..integrations.storage.urls import public_object_url


class ItemImageSchema(Schema):
    path = fields.Str(required=True)
    bucket_id = fields.Str(allow_none=True)
    original_filename = fields.Str(allow_none=True)
    mime_type = fields.Str(allow_none=True)
    size = fields.Int(allow_none=True)
    url = fields.Method("get_url", dump_only=True)

    def get_url(self, obj):
        if not current_app.config.get("STORAGE_PUBLIC_URL_BASE"):
            return None
        return public_object_url(obj.path, obj.bucket_id)


class ItemSchema(Schema):
    id = fields.Int(dump_only=True)
    type = fields.Str(required=True)
    category = fields.Str(required=True)
    brand = fields.Str(allow_none=True)
    model = fields.Str(allow_none=True)
    color = fields.Str(allow_none=True)
    description = fields.Str()
    occurred_on = fields.Date(allow_none=True)
    location = fields.Str(allow_none=True)
    status = fields.Str(dump_only=True)
    matching_status = fields.Str(dump_only=True, allow_none=True)
    reporter_user_id = fields.Int(allow_none=True)
    images = fields.List(fields.Nested(ItemImageSchema), dump_only=True)
    created_at = fields.DateTime(dump_only=True)
