# petline/utils/datetime_utils.py
"""
알림 메시지에 쓰이는 시간/날짜 처리를 모아둔 유틸리티 모듈

이 모듈의 목적:
1. Firestore / JSON 푸시로 들어오는 다양한 timestamp 표현을 datetime으로 통일
2. 알림 대상 지역(기본 Asia/Tokyo) 시간대로 변환
3. 메시지용 짧은 날짜 문자열(YY/MM/DD HH:mm) 생성
"""

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Optional
from dateutil import parser as dateutil_parser
from dateutil import tz

logger = logging.getLogger(__name__)

# 알림 메시지 기본 timezone (JST)
DEFAULT_TIMEZONE = 'Asia/Tokyo'

SHORT_FORMAT = '%y/%m/%d %H:%M'


class DateTimeUtils:
    """알림 렌더링을 위한 시간 처리 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def get_zone(zone_name: Optional[str] = None) -> tzinfo:
        """시간대 이름으로 tzinfo를 찾고, 알 수 없는 이름이면 기본 시간대를 사용"""
        zone = tz.gettz(zone_name or DEFAULT_TIMEZONE)
        if zone is None:
            logger.warning(f"알 수 없는 시간대입니다: {zone_name}. {DEFAULT_TIMEZONE}로 대체합니다.")
            zone = tz.gettz(DEFAULT_TIMEZONE)
        return zone

    @staticmethod
    def coerce_datetime(value: Any) -> datetime:
        """
        저장소에서 넘어온 timestamp 값을 UTC datetime으로 변환

        지원 형식:
        - datetime (Firestore DatetimeWithNanoseconds 포함)
        - .timestamp()를 가진 Timestamp 류 객체
        - {"_seconds": ..., "_nanoseconds": ...} 또는 {"seconds": ..., "nanos": ...}
        - ISO 8601 문자열
        - Unix timestamp(ms) 숫자

        Raises:
            ValueError: 변환할 수 없는 값인 경우
        """
        if value is None or value == '':
            raise ValueError("timestamp 값이 비어 있습니다")

        try:
            if isinstance(value, datetime):
                if value.tzinfo is None:
                    return value.replace(tzinfo=timezone.utc)
                return value.astimezone(timezone.utc)

            if isinstance(value, bool):
                raise ValueError("bool은 timestamp가 아닙니다")

            if isinstance(value, (int, float)):
                return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)

            if isinstance(value, str):
                dt = dateutil_parser.isoparse(value.replace('Z', '+00:00'))
                if dt.tzinfo is None:
                    dt = dt.replace(tzinfo=timezone.utc)
                return dt.astimezone(timezone.utc)

            if isinstance(value, dict):
                seconds = value.get('_seconds', value.get('seconds'))
                nanos = value.get('_nanoseconds', value.get('nanos', 0)) or 0
                if seconds is None:
                    raise ValueError("seconds 필드가 없습니다")
                return datetime.fromtimestamp(int(seconds) + int(nanos) / 1e9, tz=timezone.utc)

            if hasattr(value, 'timestamp'):
                return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)

        except ValueError:
            raise
        except Exception as e:
            logger.error(f"timestamp 변환 실패: {value!r} ({type(value)}) - {e}")
            raise ValueError(f"잘못된 timestamp 형식입니다: {value!r}")

        raise ValueError(f"지원하지 않는 timestamp 형식입니다: {type(value)}")

    @staticmethod
    def to_local(dt: datetime, zone_name: Optional[str] = None) -> datetime:
        """UTC datetime을 알림 대상 지역 시간으로 변환"""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(DateTimeUtils.get_zone(zone_name))

    @staticmethod
    def format_short(dt: Optional[datetime], zone_name: Optional[str] = None) -> str:
        """
        메시지 헤더용 짧은 날짜 문자열(YY/MM/DD HH:mm)을 생성합니다.
        값이 없으면 빈 문자열을 반환합니다.
        """
        if dt is None:
            return ''
        return DateTimeUtils.to_local(dt, zone_name).strftime(SHORT_FORMAT)


def now() -> datetime:
    """현재 UTC 시간 반환"""
    return DateTimeUtils.now()

def format_short(dt: Optional[datetime], zone_name: Optional[str] = None) -> str:
    """짧은 날짜 문자열 생성"""
    return DateTimeUtils.format_short(dt, zone_name)
