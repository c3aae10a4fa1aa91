# petline/services/subscriber_registry.py
import logging
from typing import List, Optional
from firebase_admin import firestore

from petline.models.subscriber import Subscriber

class SubscriberRegistry:
    """
    LINE 알림 수신자(가족) 목록을 관리하는 서비스 클래스.
    Firestore 컬렉션의 문서 ID를 LINE user id로 사용하므로 중복 등록이 불가능합니다.
    """
    def __init__(self, db=None, collection_name: str = 'line_users'):
        self.db = db if db is not None else firestore.client()
        self.users_ref = self.db.collection(collection_name)
        logging.info(f"SubscriberRegistry initialized (collection: {collection_name}).")

    def upsert(self, user_id: str, display_name: Optional[str]) -> None:
        """
        수신자를 등록하거나 최신 표시 이름으로 갱신합니다 (merge).
        같은 user_id로 여러 번 호출해도 문서는 하나만 유지됩니다.
        display_name이 None이면 기존 표시 이름을 그대로 둡니다.
        """
        if not user_id:
            raise ValueError("user_id는 필수입니다.")
        data = {'updatedAt': firestore.SERVER_TIMESTAMP}
        if display_name is not None:
            data['displayName'] = display_name
        self.users_ref.document(user_id).set(data, merge=True)
        logging.info(f"LINEユーザー登録: {display_name} ({user_id})")

    def list_all(self) -> List[str]:
        """등록된 모든 수신자 ID를 반환합니다. 빈 목록도 정상입니다."""
        return [doc.id for doc in self.users_ref.stream()]

    def get(self, user_id: str) -> Optional[Subscriber]:
        doc = self.users_ref.document(user_id).get()
        if not doc.exists:
            return None
        return Subscriber.from_dict(doc.id, doc.to_dict() or {})
