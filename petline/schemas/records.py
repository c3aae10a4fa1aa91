# petline/schemas/records.py
from marshmallow import Schema, fields, post_load, EXCLUDE, ValidationError

from petline.models.events import CareKind, CareRecord, Excretion, WalkCompleted, Weather
from petline.utils.datetime_utils import DateTimeUtils

class FirestoreTimestamp(fields.Field):
    """Firestore Timestamp / ISO 문자열 / epoch(ms)를 UTC datetime으로 역직렬화하는 필드."""

    def _deserialize(self, value, attr, data, **kwargs):
        try:
            return DateTimeUtils.coerce_datetime(value)
        except ValueError as e:
            raise ValidationError(str(e)) from e

class LenientInt(fields.Field):
    """
    1..5 코드용 필드. 숫자로 읽을 수 없는 값은 None으로 두어
    포매터가 기본 라벨을 쓰도록 합니다.
    """

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return None

class LenientStr(fields.Field):
    """
    자유 입력 문자열 필드. 숫자 등 스칼라 값은 문자열로 바꾸고
    목록이나 객체처럼 읽을 수 없는 값은 None으로 둡니다.
    """

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, str):
            return value
        if isinstance(value, (bool, int, float)):
            return str(value)
        return None

class WalkersField(fields.Field):
    """walkers는 문자열 하나 또는 문자열 목록으로 저장되어 있을 수 있습니다."""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, str):
            return [value] if value else []
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value if v]
        raise ValidationError("walkers는 문자열 또는 문자열 목록이어야 합니다.")

class PhotoListField(fields.Field):
    def _deserialize(self, value, attr, data, **kwargs):
        if not isinstance(value, (list, tuple)):
            raise ValidationError("photos는 URL 목록이어야 합니다.")
        return [v for v in value if isinstance(v, str) and v]


class WeatherSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    icon = fields.Str(allow_none=True, load_default=None)
    temp = fields.Raw(allow_none=True, load_default=None)
    wind = fields.Raw(allow_none=True, load_default=None)

    @post_load
    def make_weather(self, data, **kwargs):
        return Weather(icon=data['icon'], temp_c=data['temp'], wind_mps=data['wind'])


class WalkRecordSchema(Schema):
    """Firestore 'walks/{walkId}' 문서 스냅샷 스키마. WalkCompleted로 역직렬화됩니다."""
    class Meta:
        unknown = EXCLUDE

    startTime = FirestoreTimestamp(allow_none=True, load_default=None)
    walkers = WalkersField(allow_none=True, load_default=None)
    duration = fields.Float(allow_none=True, load_default=None)
    distance = fields.Float(allow_none=True, load_default=None)
    weather = fields.Nested(WeatherSchema, allow_none=True, load_default=None)
    poo = fields.Bool(allow_none=True, load_default=False)
    pooFirmness = LenientInt(allow_none=True, load_default=None)
    pee = fields.Bool(allow_none=True, load_default=False)
    energy = LenientInt(allow_none=True, load_default=None)
    memo = LenientStr(allow_none=True, load_default=None)
    photos = PhotoListField(allow_none=True, load_default=None)

    @post_load
    def make_event(self, data, **kwargs):
        duration = data['duration'] or 0
        return WalkCompleted(
            start_time=data['startTime'],
            walkers=data['walkers'] or [],
            duration_minutes=int(duration) if float(duration).is_integer() else duration,
            distance_meters=data['distance'] or 0,
            weather=data['weather'],
            excretion=Excretion(
                poo=bool(data['poo']),
                poo_firmness=data['pooFirmness'],
                pee=bool(data['pee'])
            ),
            energy=data['energy'],
            memo=data['memo'],
            photos=data['photos'] or []
        )


class CareRecordSchema(Schema):
    """
    Firestore 'health/{healthId}' 문서 스냅샷 스키마.
    is_update는 문서 내용이 아니라 이전 버전 존재 여부로 결정되므로 context로 전달합니다.
    """
    class Meta:
        unknown = EXCLUDE

    type = LenientStr(allow_none=True, load_default=None)
    walker = LenientStr(allow_none=True, load_default=None)
    date = FirestoreTimestamp(allow_none=True, load_default=None)
    notify = fields.Bool(allow_none=True, load_default=True)
    memo = LenientStr(allow_none=True, load_default=None)
    photos = PhotoListField(allow_none=True, load_default=None)
    pooFirmness = LenientInt(allow_none=True, load_default=None)
    foodAmount = LenientInt(allow_none=True, load_default=None)
    medicineType = LenientStr(allow_none=True, load_default=None)
    isVaccine = fields.Bool(allow_none=True, load_default=False)
    groomedBy = LenientStr(allow_none=True, load_default=None)
    shopName = LenientStr(allow_none=True, load_default=None)
    hospitalName = LenientStr(allow_none=True, load_default=None)
    reason = LenientStr(allow_none=True, load_default=None)

    def __init__(self, *args, is_update: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.is_update = is_update

    @post_load
    def make_event(self, data, **kwargs):
        return CareRecord(
            kind=CareKind.parse(data['type']),
            walker=data['walker'],
            date=data['date'],
            notify=data['notify'] is not False,
            is_update=self.is_update,
            memo=data['memo'],
            photos=data['photos'] or [],
            poo_firmness=data['pooFirmness'],
            food_amount=data['foodAmount'],
            medicine_type=data['medicineType'],
            is_vaccine=bool(data['isVaccine']),
            groomed_by=data['groomedBy'],
            shop_name=data['shopName'],
            hospital_name=data['hospitalName'],
            reason=data['reason']
        )
