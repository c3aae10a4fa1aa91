# petline/conftest.py
"""
테스트 공용 픽스처.

Firestore와 LINE API 대신 메모리 기반 가짜 객체를 사용합니다.
"""
import threading
from datetime import datetime, timezone

import pytest

from petline import create_app
from petline.services.dispatcher import BroadcastDispatcher
from petline.services.formatter import MessageFormatter
from petline.services.line_client import LineApiError
from petline.services.notification_service import NotificationService
from petline.services.subscriber_registry import SubscriberRegistry

# 2024-05-01 09:30 JST
FIXED_NOW = datetime(2024, 5, 1, 0, 30, tzinfo=timezone.utc)


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    def set(self, data, merge=False):
        with self._collection.lock:
            self._collection.set_calls += 1
            current = self._collection.docs.get(self.id) if merge else None
            merged = dict(current or {})
            merged.update(data)
            self._collection.docs[self.id] = merged

    def get(self):
        return FakeSnapshot(self.id, self._collection.docs.get(self.id))


class FakeCollection:
    def __init__(self):
        self.docs = {}
        self.set_calls = 0
        self.lock = threading.Lock()
        self.fail_stream = False

    def document(self, doc_id):
        return FakeDocument(self, doc_id)

    def stream(self):
        if self.fail_stream:
            raise RuntimeError("firestore unavailable")
        return iter([FakeSnapshot(doc_id, data) for doc_id, data in list(self.docs.items())])


class FakeFirestore:
    def __init__(self):
        self.collections = {}

    def collection(self, name):
        return self.collections.setdefault(name, FakeCollection())


class FakeLineClient:
    """multicast 호출을 기록하고, 지정한 user id의 프로필 조회를 실패시키는 가짜 LINE 클라이언트."""

    def __init__(self):
        self.multicast_calls = []
        self.profile_calls = []
        self.profiles = {}
        self.failing_profiles = set()
        self.fail_multicast = False
        self.lock = threading.Lock()

    def multicast(self, user_ids, parts):
        with self.lock:
            self.multicast_calls.append((list(user_ids), list(parts)))
        if self.fail_multicast:
            raise LineApiError("multicast failed", status_code=500)

    def get_profile(self, user_id):
        with self.lock:
            self.profile_calls.append(user_id)
        if user_id in self.failing_profiles:
            raise LineApiError("profile not found", status_code=404)
        return {"userId": user_id, "displayName": self.profiles.get(user_id, f"name-{user_id}")}

    def verify_signature(self, body, signature):
        return signature == "valid"


@pytest.fixture
def fake_db():
    return FakeFirestore()

@pytest.fixture
def registry(fake_db):
    return SubscriberRegistry(db=fake_db)

@pytest.fixture
def line_client():
    return FakeLineClient()

@pytest.fixture
def formatter():
    return MessageFormatter(pet_name='福', zone_name='Asia/Tokyo', clock=lambda: FIXED_NOW)

@pytest.fixture
def dispatcher(registry, line_client):
    return BroadcastDispatcher(registry=registry, line_client=line_client)

@pytest.fixture
def service(registry, line_client, dispatcher, formatter):
    return NotificationService(registry=registry, line_client=line_client,
                               dispatcher=dispatcher, formatter=formatter, max_workers=4)

@pytest.fixture
def app(registry, line_client, formatter):
    app = create_app('testing', services={
        'registry': registry,
        'line_client': line_client,
        'formatter': formatter,
    })
    return app

@pytest.fixture
def client(app):
    return app.test_client()
