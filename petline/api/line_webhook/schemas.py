# petline/api/line_webhook/schemas.py
from marshmallow import Schema, fields, EXCLUDE

class WebhookBodySchema(Schema):
    """
    LINE 웹훅 요청 본문 스키마.
    개별 이벤트의 형식 검증은 이벤트 단위로 처리하므로 여기서는 목록 형태만 확인합니다.
    """
    class Meta:
        unknown = EXCLUDE

    destination = fields.Str(allow_none=True, load_default=None)
    events = fields.List(fields.Dict(), allow_none=True, load_default=list)
