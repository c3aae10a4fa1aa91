# petline/api/line_webhook/routes.py
import logging
from flask import Blueprint, request, current_app
from marshmallow import ValidationError

from .schemas import WebhookBodySchema

line_webhook_bp = Blueprint('line_webhook_bp', __name__)

@line_webhook_bp.route('/line', methods=['GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'], provide_automatic_options=False)
def line_webhook():
    """LINE 웹훅. follow/message 이벤트를 보낸 사용자를 알림 수신자로 등록합니다."""
    if request.method != 'POST':
        return 'Method Not Allowed', 405

    if current_app.config.get('LINE_VERIFY_SIGNATURE'):
        line_client = current_app.services['line_client']
        signature = request.headers.get('X-Line-Signature')
        if not line_client.verify_signature(request.get_data(), signature):
            logging.warning("Webhook signature verification failed.")
            return 'Invalid signature', 400

    service = current_app.services['notifications']
    try:
        body = WebhookBodySchema().load(request.get_json(force=True, silent=False))
        service.register_from_webhook(body.get('events') or [])
        return 'OK', 200
    except ValidationError as err:
        logging.error(f"Webhookエラー: 잘못된 본문 형식 {err.messages}")
        return 'Error', 500
    except Exception as e:
        logging.error(f"Webhookエラー: {e}", exc_info=True)
        return 'Error', 500
