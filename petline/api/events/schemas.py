# petline/api/events/schemas.py
from marshmallow import Schema, fields, pre_load, EXCLUDE

class WalkCreatedEventSchema(Schema):
    """POST /events/walks/created 푸시 본문. value가 생성된 문서 스냅샷입니다."""
    class Meta:
        unknown = EXCLUDE

    walkId = fields.Str(allow_none=True, load_default=None)
    value = fields.Dict(required=True)


class HealthWrittenEventSchema(Schema):
    """POST /events/health/written 푸시 본문. 생성/수정/삭제 전후 스냅샷을 담습니다."""
    class Meta:
        unknown = EXCLUDE

    healthId = fields.Str(allow_none=True, load_default=None)
    before = fields.Dict(allow_none=True, load_default=None)
    after = fields.Dict(allow_none=True, load_default=None)

    @pre_load
    def drop_empty_snapshots(self, data, **kwargs):
        # 빈 객체({})는 문서가 없는 것으로 취급
        if isinstance(data, dict):
            data = dict(data)
            for key in ('before', 'after'):
                if data.get(key) == {}:
                    data[key] = None
        return data
