from marshmallow import EXCLUDE, Schema, fields, validate

from .item import ItemSchema


class MatchSchema(Schema):
    id = fields.Int(dump_only=True)
    lost_item_id = fields.Int(required=True)
    found_item_id = fields.Int(required=True)
    confidence_score = fields.Float(required=True)
    status = fields.Str()
    created_at = fields.DateTime(dump_only=True)


class MatchWithItemsSchema(MatchSchema):
    lost_item = fields.Nested(ItemSchema, dump_only=True)
    found_item = fields.Nested(ItemSchema, dump_only=True)


class MatchRunRequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    lost_item_id = fields.Int(
        required=True,
        data_key="lostItemId",
        strict=False,
        validate=validate.Range(min=1),
        error_messages={"required": "lostItemId is required", "null": "lostItemId is required", "invalid": "lostItemId must be an integer"},
    )


class MatchStatusUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    # Matches never return to pending once reviewed
    status = fields.Str(required=True, validate=validate.OneOf(["confirmed", "rejected"]))
