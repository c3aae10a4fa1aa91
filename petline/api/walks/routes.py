# petline/api/walks/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from .schemas import WalkStartRequestSchema

walks_bp = Blueprint('walks_bp', __name__)

@walks_bp.route('/start', methods=['POST'])
def notify_walk_start():
    """산책 시작 알림 API. 전송 결과와 관계없이 항상 success를 반환합니다."""
    service = current_app.services['notifications']
    try:
        event = WalkStartRequestSchema().load(request.get_json(silent=True) or {})
        service.notify_walk_start(event.walkers)
    except ValidationError as err:
        logging.warning(f"Walk start request has invalid walkers: {err.messages}")
        service.notify_walk_start([])
    return jsonify({"success": True}), 200
