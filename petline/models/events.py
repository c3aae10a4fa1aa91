# petline/models/events.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union
import logging

class CareKind(Enum):
    """お世話記録(health 컬렉션)의 기록 종류"""
    EXCRETION = "excretion"
    FOOD = "food"
    MEDICINE = "medicine"
    BATH = "bath"
    BRUSHING = "brushing"
    GROOMING = "grooming"
    HOSPITAL = "hospital"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str]) -> "CareKind":
        """알 수 없는 종류 문자열은 OTHER로 취급합니다."""
        try:
            return cls(value)
        except ValueError:
            logging.warning(f"Unknown care record type '{value}'. Falling back to OTHER.")
            return cls.OTHER

@dataclass
class Weather:
    icon: Optional[str] = None
    temp_c: Optional[float] = None
    wind_mps: Optional[float] = None

@dataclass
class Excretion:
    poo: bool = False
    poo_firmness: Optional[int] = None
    pee: bool = False

@dataclass
class WalkStarted:
    """
    산책 시작 직접 호출 이벤트.
    저장되지 않으므로 시각 정보가 없고, 렌더링 시점의 현재 시간을 사용합니다.
    """
    walkers: List[str] = field(default_factory=list)

@dataclass
class WalkCompleted:
    """Firestore 'walks' 컬렉션 문서가 생성될 때 한 번만 발생하는 이벤트."""
    start_time: Optional[datetime] = None
    walkers: List[str] = field(default_factory=list)
    duration_minutes: Union[int, float] = 0
    distance_meters: Union[int, float] = 0
    weather: Optional[Weather] = None
    excretion: Excretion = field(default_factory=Excretion)
    energy: Optional[int] = None
    memo: Optional[str] = None
    photos: List[str] = field(default_factory=list)

@dataclass
class CareRecord:
    """
    Firestore 'health' 컬렉션 문서의 생성/수정 이벤트.
    is_update는 이전 버전 문서가 존재했는지 여부로 결정됩니다.
    """
    kind: CareKind = CareKind.OTHER
    walker: Optional[str] = None
    date: Optional[datetime] = None
    notify: bool = True
    is_update: bool = False
    memo: Optional[str] = None
    photos: List[str] = field(default_factory=list)
    # 종류별 필드
    poo_firmness: Optional[int] = None
    food_amount: Optional[int] = None
    medicine_type: Optional[str] = None
    is_vaccine: bool = False
    groomed_by: Optional[str] = None
    shop_name: Optional[str] = None
    hospital_name: Optional[str] = None
    reason: Optional[str] = None

DomainEvent = Union[WalkStarted, WalkCompleted, CareRecord]
