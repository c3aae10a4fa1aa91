# petline/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from typing import Any, Dict, Optional
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
import firebase_admin
from firebase_admin import credentials

# - 설정
from petline.core.config import config_by_name

# - API 블루프린트
from petline.api.line_webhook.routes import line_webhook_bp
from petline.api.walks.routes import walks_bp
from petline.api.events.routes import events_bp

# - 서비스 모듈
from petline.services.dispatcher import BroadcastDispatcher
from petline.services.formatter import MessageFormatter
from petline.services.line_client import LineMessagingClient
from petline.services.notification_service import NotificationService
from petline.services.subscriber_registry import SubscriberRegistry

def _init_firebase(app: Flask):
    """Firebase Admin SDK를 한 번만 초기화합니다."""
    if firebase_admin._apps:
        return
    cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
    if cred_path:
        if not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
        firebase_admin.initialize_app(credentials.Certificate(cred_path))
    else:
        # Cloud Run 등에서는 Application Default Credentials 사용
        firebase_admin.initialize_app()

def create_app(config_name: Optional[str] = None, services: Optional[Dict[str, Any]] = None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' / 'production' / 'testing' (기본: FLASK_ENV)
    :param services: 미리 생성한 협력 객체 ('registry', 'line_client' 등).
                     주어진 항목은 그대로 사용하고 나머지만 기본값으로 생성합니다.
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    injected = dict(services or {})

    # 필수 환경 변수 검증 (LINE 클라이언트를 직접 주입하지 않은 경우)
    if 'line_client' not in injected:
        missing_vars = [name for name in app.config['REQUIRED_SETTINGS'] if not app.config.get(name)]
        if missing_vars:
            raise ValueError(f"필수 환경 변수가 설정되지 않았습니다: {', '.join(missing_vars)}")

    # =====================================================================================
    # 4. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 4-1. 외부 협력 객체 (Firestore 레지스트리, LINE 클라이언트)
    if 'registry' in injected:
        app.services['registry'] = injected['registry']
    else:
        try:
            _init_firebase(app)
            app.services['registry'] = SubscriberRegistry(collection_name=app.config['LINE_USERS_COLLECTION'])
            logging.info("Subscriber registry initialized successfully")
        except Exception as e:
            logging.error(f"Failed to initialize subscriber registry: {e}")
            raise

    app.services['line_client'] = injected.get('line_client') or LineMessagingClient(
        channel_access_token=app.config['LINE_CHANNEL_ACCESS_TOKEN'],
        channel_secret=app.config['LINE_CHANNEL_SECRET'],
        timeout=app.config['LINE_API_TIMEOUT']
    )

    # 4-2. 협력 객체를 주입받는 파이프라인 서비스
    app.services['formatter'] = injected.get('formatter') or MessageFormatter(
        pet_name=app.config['PET_NAME'],
        zone_name=app.config['NOTIFY_TIMEZONE']
    )
    app.services['dispatcher'] = injected.get('dispatcher') or BroadcastDispatcher(
        registry=app.services['registry'],
        line_client=app.services['line_client'],
        chunk_size=app.config['LINE_MULTICAST_MAX_RECIPIENTS']
    )
    app.services['notifications'] = NotificationService(
        registry=app.services['registry'],
        line_client=app.services['line_client'],
        dispatcher=app.services['dispatcher'],
        formatter=app.services['formatter'],
        max_workers=app.config['WEBHOOK_MAX_WORKERS']
    )

    # =====================================================================================
    # 5. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(line_webhook_bp, url_prefix='/webhook')
    app.register_blueprint(walks_bp, url_prefix='/api/walks')
    app.register_blueprint(events_bp, url_prefix='/events')

    # =====================================================================================
    # 6. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        if isinstance(err, HTTPException):
            return err
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "サーバー内部で予期しないエラーが発生しました。"}
        return jsonify(response), 500

    # =====================================================================================
    # 7. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
