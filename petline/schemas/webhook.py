# petline/schemas/webhook.py
from marshmallow import Schema, fields, EXCLUDE

class WebhookSourceSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    type = fields.Str(allow_none=True, load_default=None)
    userId = fields.Str(allow_none=True, load_default=None)

class WebhookEventSchema(Schema):
    """LINE 웹훅 이벤트 한 건. 수신자 등록에 필요한 type/source만 읽습니다."""
    class Meta:
        unknown = EXCLUDE

    type = fields.Str(required=True)
    source = fields.Nested(WebhookSourceSchema, allow_none=True, load_default=None)
