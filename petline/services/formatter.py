# petline/services/formatter.py
"""
도메인 이벤트를 LINE 메시지 파트로 변환하는 포매터.

I/O가 없는 순수 함수들로만 구성되어 있으며, 어떤 입력에도 예외를 던지지 않습니다.
값이 없거나 범위를 벗어난 코드는 정해진 기본 라벨로 대체됩니다.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Mapping, Optional

from petline.models.events import CareKind, CareRecord, WalkCompleted, WalkStarted
from petline.models.message import MAX_IMAGE_PARTS, ImagePart, RenderedMessage, TextPart
from petline.utils.datetime_utils import DateTimeUtils

DEFAULT_PET_NAME = '福'
UNKNOWN_WALKER = '誰か'

FIRMNESS_LABELS = {1: 'とてもやわらかい', 2: 'やわらかい', 3: '普通', 4: '硬め', 5: '硬い'}
FOOD_AMOUNT_LABELS = {1: '空っぽ', 2: '少し', 3: '普通', 4: '多め', 5: '満杯'}
ENERGY_LABELS = {1: '絶不調 😫', 2: '不調 😓', 3: '普通 😐', 4: '元気 🙂', 5: '絶好調 😆'}
DEFAULT_LABEL = '普通'

WEATHER_ICONS = {'01': '☀️', '02': '⛅', '03': '☁️', '09': '🌧️', '10': '☔', '13': '⛄'}
DEFAULT_WEATHER_ICON = '🌤️'

UPDATE_MARKER = '(修正)'

CARE_TITLES = {
    CareKind.EXCRETION: '💩 排泄',
    CareKind.FOOD: '🥣 ご飯',
    CareKind.MEDICINE: '💊 薬',
    CareKind.BATH: '🛁 入浴',
    CareKind.BRUSHING: '✨ ブラッシング',
    CareKind.GROOMING: '✂️ 散髪',
    CareKind.HOSPITAL: '🏥 病院',
    CareKind.OTHER: '✨ お世話',
}


def lookup_label(table: Mapping[int, str], code, default: str = DEFAULT_LABEL) -> str:
    """1..5 코드를 라벨로 변환합니다. 없거나 범위를 벗어나면 기본 라벨."""
    if isinstance(code, bool):
        return default
    try:
        return table.get(int(code), default)
    except (TypeError, ValueError, OverflowError):
        return default

def firmness_label(code) -> str:
    return lookup_label(FIRMNESS_LABELS, code)

def food_amount_label(code) -> str:
    return lookup_label(FOOD_AMOUNT_LABELS, code)

def energy_label(code) -> str:
    return lookup_label(ENERGY_LABELS, code)

def weather_icon(icon_code: Optional[str]) -> str:
    """OpenWeather 아이콘 코드의 앞 두 글자로 이모지를 고릅니다 (예: '10d' -> ☔)."""
    if not isinstance(icon_code, str):
        return DEFAULT_WEATHER_ICON
    return WEATHER_ICONS.get(icon_code[:2], DEFAULT_WEATHER_ICON)

def format_distance_km(meters) -> str:
    try:
        return f"{float(meters) / 1000:.2f}"
    except (TypeError, ValueError):
        return "0.00"

def _format_number(value) -> str:
    """정수로 표현 가능한 수는 소수점 없이 출력합니다 (30.0 -> '30')."""
    if value is None:
        return '-'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

def image_parts(photos: Optional[Iterable[str]]) -> List[ImagePart]:
    """사진 URL 목록 중 앞의 4개만 이미지 파트로 변환합니다 (순서 유지)."""
    urls = [url for url in (photos or []) if isinstance(url, str) and url]
    return [ImagePart(url=url) for url in urls[:MAX_IMAGE_PARTS]]


class MessageFormatter:
    """
    이벤트 종류별 메시지 규칙을 담당하는 포매터.
    펫 이름과 시간대는 설정에서 주입받고, 현재 시간은 clock으로 교체할 수 있습니다.
    """

    def __init__(self, pet_name: str = DEFAULT_PET_NAME, zone_name: Optional[str] = None, clock=None):
        self.pet_name = pet_name or DEFAULT_PET_NAME
        self.zone_name = zone_name
        self.clock = clock or DateTimeUtils.now

    def _date(self, dt: Optional[datetime]) -> str:
        return DateTimeUtils.format_short(dt, self.zone_name)

    # --- 공개 진입점 ---
    def should_notify(self, event) -> bool:
        """
        렌더링 전에 평가하는 발송 게이트.
        お世話記録의 notify가 명시적으로 False일 때만 발송하지 않습니다.
        """
        if isinstance(event, CareRecord):
            return event.notify is not False
        return True

    def render(self, event) -> RenderedMessage:
        """도메인 이벤트를 렌더링합니다. 발송하지 않는 이벤트는 빈 메시지를 돌려줍니다."""
        if not self.should_notify(event):
            return RenderedMessage()
        try:
            if isinstance(event, WalkStarted):
                return self.render_walk_start(event)
            if isinstance(event, WalkCompleted):
                return self.render_walk_completed(event)
            if isinstance(event, CareRecord):
                return self.render_care_record(event)
        except Exception as e:
            logging.error(f"메시지 렌더링 실패 ({type(event).__name__}): {e}", exc_info=True)
            return RenderedMessage(parts=[TextPart(body=f"🐾 {self.pet_name}の記録が更新されました。")])

        logging.warning(f"Unsupported event type for rendering: {type(event).__name__}")
        return RenderedMessage(parts=[TextPart(body=f"🐾 {self.pet_name}の記録が更新されました。")])

    # --- 이벤트별 규칙 ---
    def render_walk_start(self, event: WalkStarted) -> RenderedMessage:
        walkers = [w for w in (event.walkers or []) if w]
        walkers_text = 'と'.join(walkers) if walkers else UNKNOWN_WALKER
        date_str = self._date(self.clock())
        text = (
            f"🐕 散歩スタート！\n{date_str}\n\n"
            f"{walkers_text}が{self.pet_name}くんの散歩に出発しました💨\n"
            f"いってらっしゃい！"
        )
        return RenderedMessage(parts=[TextPart(body=text)])

    def render_walk_completed(self, event: WalkCompleted) -> RenderedMessage:
        walkers_str = ', '.join(event.walkers) if event.walkers else UNKNOWN_WALKER

        weather_str = ''
        if event.weather is not None:
            w = event.weather
            weather_str = f"\n天気: {weather_icon(w.icon)} {_format_number(w.temp_c)}℃ (風速{_format_number(w.wind_mps)}m)"

        excretion = event.excretion
        firmness_str = f" ({firmness_label(excretion.poo_firmness)})" if excretion.poo and excretion.poo_firmness else ''
        poo_str = f"あり💩{firmness_str}" if excretion.poo else 'なし'
        pee_str = 'あり💧' if excretion.pee else 'なし'

        energy_str = f"\n元気: {energy_label(event.energy)}" if event.energy else ''
        memo_str = f"\n\n📝 メモ:\n{event.memo}" if event.memo else ''

        text = (
            f"🏁 散歩終了\n{self._date(event.start_time)}\n\n"
            f"👤 担当: {walkers_str}\n"
            f"⏱️ 時間: {_format_number(event.duration_minutes or 0)}分\n"
            f"📍 距離: {format_distance_km(event.distance_meters)}km"
            f"{weather_str}"
            f"{energy_str}"
            f"\n\n🚽 トイレ:\nうんち: {poo_str} / おしっこ: {pee_str}"
            f"{memo_str}"
        )
        return RenderedMessage(parts=[TextPart(body=text), *image_parts(event.photos)])

    def care_detail(self, record: CareRecord) -> str:
        """종류별 상세 문구. 모든 CareKind를 처리하며 OTHER는 일반 문구를 사용합니다."""
        walker = record.walker or UNKNOWN_WALKER
        kind = record.kind

        if kind is CareKind.EXCRETION:
            return f"{walker}がトイレの世話をしました。\nうんちの硬さ: {firmness_label(record.poo_firmness)}"
        if kind is CareKind.FOOD:
            return f"{walker}がご飯をあげました。\n残量: {food_amount_label(record.food_amount)}"
        if kind is CareKind.MEDICINE:
            med_type = record.medicine_type or '薬'
            vaccine = '(予防接種)' if record.is_vaccine else ''
            return f"{walker}が{med_type}{vaccine}をあげました。"
        if kind is CareKind.BATH:
            return f"{walker}が{self.pet_name}をお風呂に入れました✨"
        if kind is CareKind.BRUSHING:
            return f"{walker}がブラッシングをしてふわふわになりました✨"
        if kind is CareKind.GROOMING:
            place = f"お店({record.shop_name or ''})" if record.groomed_by == 'shop' else '自宅'
            return f"{walker}が{place}で散髪しました💈"
        if kind is CareKind.HOSPITAL:
            hospital_name = record.hospital_name or '病院'
            return f"{walker}が{hospital_name}に連れて行きました。\n理由: {record.reason or 'なし'}"
        return f"{walker}がお世話をしました。"

    def care_title(self, record: CareRecord) -> str:
        title = CARE_TITLES.get(record.kind, CARE_TITLES[CareKind.OTHER])
        return f"{title} {UPDATE_MARKER}" if record.is_update else title

    def render_care_record(self, record: CareRecord) -> RenderedMessage:
        memo = f"\n📝 {record.memo}" if record.memo else ''
        text = f"{self.care_title(record)}\n{self._date(record.date)}\n\n{self.care_detail(record)}{memo}"
        return RenderedMessage(parts=[TextPart(body=text), *image_parts(record.photos)])

