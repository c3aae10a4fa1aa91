# petline/api/events/routes.py
"""
Firestore 문서 이벤트 푸시(Eventarc 등)를 받는 엔드포인트.

알림 실패가 원본 기록 저장을 재시도/롤백시키지 않도록 항상 200으로 응답합니다.
"""
import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from .schemas import WalkCreatedEventSchema, HealthWrittenEventSchema

events_bp = Blueprint('events_bp', __name__)

@events_bp.route('/walks/created', methods=['POST'])
def walk_created():
    """walks/{walkId} 문서 생성 이벤트 (생성 시 1회만 알림)."""
    service = current_app.services['notifications']
    try:
        payload = WalkCreatedEventSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        logging.error(f"Invalid walk created event: {err.messages}")
        return jsonify({"notified": False}), 200

    notified = service.on_walk_created(payload['value'], walk_id=payload.get('walkId'))
    return jsonify({"notified": notified}), 200

@events_bp.route('/health/written', methods=['POST'])
def health_written():
    """health/{healthId} 문서 생성/수정/삭제 이벤트."""
    service = current_app.services['notifications']
    try:
        payload = HealthWrittenEventSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        logging.error(f"Invalid health written event: {err.messages}")
        return jsonify({"notified": False}), 200

    notified = service.on_care_record_written(
        payload.get('before'),
        payload.get('after'),
        record_id=payload.get('healthId')
    )
    return jsonify({"notified": notified}), 200
