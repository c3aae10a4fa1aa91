# petline/core/config.py

import os # 환경 변수를 읽기 위해 사용합니다.

def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')

class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # LINE Messaging API 채널 액세스 토큰 (multicast, 프로필 조회에 사용)
    LINE_CHANNEL_ACCESS_TOKEN = os.getenv('LINE_CHANNEL_ACCESS_TOKEN')
    # 웹훅 서명(X-Line-Signature) 검증에 사용하는 채널 시크릿
    LINE_CHANNEL_SECRET = os.getenv('LINE_CHANNEL_SECRET')
    LINE_VERIFY_SIGNATURE = _env_bool('LINE_VERIFY_SIGNATURE', False)
    LINE_API_TIMEOUT = float(os.getenv('LINE_API_TIMEOUT', 10))
    # LINE multicast는 요청당 최대 500명까지 허용합니다.
    LINE_MULTICAST_MAX_RECIPIENTS = int(os.getenv('LINE_MULTICAST_MAX_RECIPIENTS', 500))
    LINE_USERS_COLLECTION = os.getenv('LINE_USERS_COLLECTION', 'line_users')

    # 서비스 계정 키 파일 경로. 없으면 Application Default Credentials를 사용합니다.
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

    PET_NAME = os.getenv('PET_NAME', '福')
    NOTIFY_TIMEZONE = os.getenv('NOTIFY_TIMEZONE', 'Asia/Tokyo')
    WEBHOOK_MAX_WORKERS = int(os.getenv('WEBHOOK_MAX_WORKERS', 8))

    # 시작 시 반드시 있어야 하는 설정 (LINE 클라이언트를 주입받지 않는 경우)
    REQUIRED_SETTINGS = ('LINE_CHANNEL_ACCESS_TOKEN', 'LINE_CHANNEL_SECRET')

class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True

class ProductionConfig(Config):
    """운영 환경 설정. 웹훅 서명 검증을 기본으로 켭니다."""
    DEBUG = False
    LINE_VERIFY_SIGNATURE = _env_bool('LINE_VERIFY_SIGNATURE', True)

class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    LINE_VERIFY_SIGNATURE = False
    WEBHOOK_MAX_WORKERS = 4

# FLASK_ENV 값에 따라 create_app에서 적절한 설정을 선택하는 데 사용됩니다.
config_by_name = dict(
    development=DevelopmentConfig,
    production=ProductionConfig,
    testing=TestingConfig
)
