# petline/models/subscriber.py
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

@dataclass
class Subscriber:
    """
    Firestore 'line_users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    문서 ID가 곧 LINE user id이며, 같은 ID로 다시 등록하면 병합(merge)됩니다.
    """
    user_id: str
    display_name: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, user_id: str, data: Dict[str, Any]) -> "Subscriber":
        """Firestore 문서(camelCase 필드)로부터 인스턴스를 생성합니다."""
        updated_at = data.get('updatedAt')
        return cls(
            user_id=user_id,
            display_name=data.get('displayName'),
            updated_at=updated_at if isinstance(updated_at, datetime) else None
        )
