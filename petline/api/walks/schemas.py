# petline/api/walks/schemas.py
from marshmallow import Schema, fields, post_load, EXCLUDE

from petline.models.events import WalkStarted

class WalkStartRequestSchema(Schema):
    """POST /api/walks/start 산책 시작 알림 요청 스키마."""
    class Meta:
        unknown = EXCLUDE

    walkers = fields.List(fields.Str(), allow_none=True, load_default=list)

    @post_load
    def make_event(self, data, **kwargs):
        return WalkStarted(walkers=[w for w in (data.get('walkers') or []) if w])
