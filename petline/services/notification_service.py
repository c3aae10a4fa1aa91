# petline/services/notification_service.py
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Optional

from marshmallow import ValidationError

from petline.schemas.webhook import WebhookEventSchema
from petline.models.events import CareRecord, WalkStarted
from petline.schemas.records import CareRecordSchema, WalkRecordSchema
from petline.services.dispatcher import BroadcastDispatcher
from petline.services.formatter import MessageFormatter

REGISTERING_EVENT_TYPES = ('follow', 'message')

class NotificationService:
    """
    외부 트리거(웹훅, 직접 호출, 기록 생성/수정)를 받아
    수신자 등록 또는 포매터 -> 브로드캐스트 흐름을 실행하는 서비스 클래스.

    각 호출은 독립적이며 인스턴스 상태를 변경하지 않습니다.
    공유 자원은 Firestore에 있는 수신자 레지스트리뿐입니다.
    """
    def __init__(self, registry, line_client, dispatcher: BroadcastDispatcher,
                 formatter: Optional[MessageFormatter] = None, max_workers: int = 8):
        self.registry = registry
        self.line_client = line_client
        self.dispatcher = dispatcher
        self.formatter = formatter or MessageFormatter()
        self.max_workers = max(1, max_workers)

    # =====================================================================================
    # 1. 수신자 등록 (LINE 웹훅)
    # =====================================================================================
    def _register_one(self, raw_event: Dict[str, Any]) -> bool:
        """
        웹훅 이벤트 한 건을 처리합니다. 실패는 이 이벤트 안에서만 기록하고 삼킵니다.
        :return: 수신자를 등록/갱신했으면 True
        """
        try:
            event = WebhookEventSchema().load(raw_event)
        except ValidationError as err:
            logging.warning(f"Ignoring malformed webhook event: {err.messages}")
            return False

        if event['type'] not in REGISTERING_EVENT_TYPES:
            return False

        user_id = (event.get('source') or {}).get('userId')
        if not user_id:
            logging.warning(f"userId가 없는 {event['type']} 이벤트를 건너뜁니다.")
            return False

        display_name = None
        try:
            profile = self.line_client.get_profile(user_id) or {}
            display_name = profile.get('displayName')
        except Exception as e:
            # 프로필을 못 가져와도 수신자 등록은 진행합니다 (기존 표시 이름 유지).
            logging.error(f"プロフィール取得失敗 (userId: {user_id}): {e}", exc_info=True)

        try:
            self.registry.upsert(user_id, display_name)
            return True
        except Exception as e:
            logging.error(f"LINEユーザー登録失敗 (userId: {user_id}): {e}", exc_info=True)
            return False

    def register_from_webhook(self, events: Iterable[Dict[str, Any]]) -> int:
        """
        웹훅 이벤트 목록을 동시에 처리하고, 모두 끝난 뒤 등록된 수를 반환합니다.
        한 이벤트의 실패는 다른 이벤트 처리를 막거나 취소하지 않습니다.
        """
        events = list(events)
        if not events:
            return 0

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(events))) as executor:
            results = list(executor.map(self._register_one, events))

        registered = sum(1 for r in results if r)
        logging.info(f"Webhook processed: {len(events)} events, {registered} subscribers registered.")
        return registered

    # =====================================================================================
    # 2. 산책 시작 알림 (직접 호출)
    # =====================================================================================
    def notify_walk_start(self, walkers: List[str]) -> bool:
        """산책 시작 메시지를 렌더링해 브로드캐스트합니다. 전송 실패는 호출자에게 전달되지 않습니다."""
        message = self.formatter.render(WalkStarted(walkers=list(walkers or [])))
        self.dispatcher.broadcast(message.parts)
        return True

    # =====================================================================================
    # 3. 산책 종료 알림 (walks 문서 생성 시 1회)
    # =====================================================================================
    def on_walk_created(self, snapshot: Optional[Dict[str, Any]], walk_id: Optional[str] = None) -> bool:
        """
        새로 생성된 산책 기록을 알립니다. 수정 이벤트에는 반응하지 않습니다.
        :return: 브로드캐스트를 시도했으면 True
        """
        if not snapshot:
            logging.warning(f"Walk snapshot is empty (walk_id: {walk_id}). Skipping notification.")
            return False
        try:
            event = WalkRecordSchema().load(snapshot)
        except ValidationError as err:
            logging.error(f"Invalid walk record (walk_id: {walk_id}): {err.messages}")
            return False

        message = self.formatter.render(event)
        self.dispatcher.broadcast(message.parts)
        return True

    # =====================================================================================
    # 4. お世話記録 알림 (health 문서 생성/수정 시)
    # =====================================================================================
    def on_care_record_written(self, before: Optional[Dict[str, Any]], after: Optional[Dict[str, Any]],
                               record_id: Optional[str] = None) -> bool:
        """
        お世話記録의 생성/수정을 알립니다.
        - after가 없으면 삭제이므로 아무것도 하지 않습니다.
        - notify가 명시적으로 False이면 렌더링 전에 중단합니다.
        - 이전 버전(before)이 있으면 수정으로 간주해 제목에 (修正)을 붙입니다.
        """
        if after is None:
            logging.info(f"Care record deleted (record_id: {record_id}). No notification.")
            return False

        if after.get('notify') is False:
            logging.info(f"Care record notification suppressed (record_id: {record_id}).")
            return False

        try:
            record: CareRecord = CareRecordSchema(is_update=before is not None).load(after)
        except ValidationError as err:
            logging.error(f"Invalid care record (record_id: {record_id}): {err.messages}")
            return False

        if not self.formatter.should_notify(record):
            return False

        message = self.formatter.render(record)
        self.dispatcher.broadcast(message.parts)
        return True
