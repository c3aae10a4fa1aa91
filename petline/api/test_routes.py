# petline/api/test_routes.py
"""
HTTP 엔드포인트 테스트 (Flask test client)
"""

import pytest

from petline import create_app


def test_webhook_rejects_non_post(client):
    response = client.get('/webhook/line')
    assert response.status_code == 405
    assert response.get_data(as_text=True) == 'Method Not Allowed'


@pytest.mark.parametrize("method", ['options', 'put', 'delete'])
def test_webhook_rejects_other_methods(client, registry, method):
    response = getattr(client, method)('/webhook/line', json={"events": [{"type": "follow", "source": {"userId": "U1"}}]})
    assert response.status_code == 405
    assert response.get_data(as_text=True) == 'Method Not Allowed'
    assert registry.list_all() == []


def test_webhook_registers_followers(client, registry, line_client):
    """follow 이벤트 2건 중 프로필 조회 1건이 실패해도 200 응답, 두 명 모두 등록"""
    line_client.failing_profiles = {"U2"}
    body = {
        "destination": "Uxxxx",
        "events": [
            {"type": "follow", "source": {"type": "user", "userId": "U1"}},
            {"type": "follow", "source": {"type": "user", "userId": "U2"}},
        ]
    }
    response = client.post('/webhook/line', json=body)

    assert response.status_code == 200
    assert response.get_data(as_text=True) == 'OK'
    assert set(registry.list_all()) == {"U1", "U2"}


def test_webhook_without_events_is_ok(client):
    response = client.post('/webhook/line', json={"destination": "Uxxxx", "events": []})
    assert response.status_code == 200


@pytest.mark.parametrize("payload", ['not json', '[1, 2]', '{"events": "nope"}', 'null'])
def test_webhook_malformed_payload_returns_500(client, payload):
    response = client.post('/webhook/line', data=payload, content_type='application/json')
    assert response.status_code == 500
    assert response.get_data(as_text=True) == 'Error'


def test_webhook_signature_verification(registry, line_client, formatter):
    app = create_app('testing', services={'registry': registry, 'line_client': line_client, 'formatter': formatter})
    app.config['LINE_VERIFY_SIGNATURE'] = True
    client = app.test_client()
    body = {"events": [{"type": "follow", "source": {"userId": "U1"}}]}

    rejected = client.post('/webhook/line', json=body, headers={'X-Line-Signature': 'forged'})
    assert rejected.status_code == 400
    assert registry.list_all() == []

    accepted = client.post('/webhook/line', json=body, headers={'X-Line-Signature': 'valid'})
    assert accepted.status_code == 200
    assert registry.list_all() == ["U1"]


def test_walk_start_always_succeeds(client, registry, line_client):
    registry.upsert("U1", "Alice")
    line_client.fail_multicast = True

    response = client.post('/api/walks/start', json={"walkers": ["Alice", "Bob"]})

    assert response.status_code == 200
    assert response.get_json() == {"success": True}
    assert "AliceとBob" in line_client.multicast_calls[0][1][0].body


def test_walk_start_without_body(client, registry, line_client):
    registry.upsert("U1", "Alice")
    response = client.post('/api/walks/start')
    assert response.get_json() == {"success": True}
    assert "誰かが" in line_client.multicast_calls[0][1][0].body


def test_walk_created_event(client, registry, line_client):
    registry.upsert("U1", "Alice")
    body = {
        "walkId": "w1",
        "value": {
            "startTime": {"_seconds": 1714601700, "_nanoseconds": 0},
            "walkers": ["Alice"],
            "duration": 20,
            "distance": 1500,
        }
    }
    response = client.post('/events/walks/created', json=body)

    assert response.status_code == 200
    assert response.get_json() == {"notified": True}
    assert "1.50km" in line_client.multicast_calls[0][1][0].body


def test_walk_created_event_malformed(client, line_client):
    response = client.post('/events/walks/created', json={"walkId": "w1"})
    assert response.status_code == 200
    assert response.get_json() == {"notified": False}
    assert line_client.multicast_calls == []


def test_health_written_event(client, registry, line_client):
    registry.upsert("U1", "Alice")
    body = {
        "healthId": "h1",
        "before": {"type": "hospital", "walker": "Alice"},
        "after": {"type": "hospital", "walker": "Alice", "hospitalName": "さくら動物病院", "reason": "健康診断"},
    }
    response = client.post('/events/health/written', json=body)

    assert response.get_json() == {"notified": True}
    text = line_client.multicast_calls[0][1][0].body
    assert text.startswith("🏥 病院 (修正)")
    assert "Aliceがさくら動物病院に連れて行きました。\n理由: 健康診断" in text


def test_health_written_delete_and_suppressed(client, registry, line_client):
    registry.upsert("U1", "Alice")

    deleted = client.post('/events/health/written', json={"before": {"type": "bath"}, "after": None})
    assert deleted.get_json() == {"notified": False}

    suppressed = client.post('/events/health/written', json={"before": {}, "after": {"type": "bath", "notify": False}})
    assert suppressed.get_json() == {"notified": False}

    assert line_client.multicast_calls == []


def test_create_app_requires_line_settings(monkeypatch, registry):
    """LINE 클라이언트를 주입하지 않았는데 토큰이 없으면 시작 시 실패"""
    from petline.core.config import TestingConfig

    monkeypatch.setattr(TestingConfig, 'LINE_CHANNEL_ACCESS_TOKEN', None)
    monkeypatch.setattr(TestingConfig, 'LINE_CHANNEL_SECRET', None)
    with pytest.raises(ValueError):
        create_app('testing', services={'registry': registry})


def test_health_written_overflowing_number(client, registry, line_client):
    """1e999 같은 값은 JSON에서 무한대로 읽히지만 기본 라벨로 알림"""
    registry.upsert("U1", "Alice")
    payload = '{"healthId": "h1", "after": {"type": "excretion", "walker": "Alice", "pooFirmness": 1e999}}'

    response = client.post('/events/health/written', data=payload, content_type='application/json')

    assert response.status_code == 200
    assert response.get_json() == {"notified": True}
    assert "うんちの硬さ: 普通" in line_client.multicast_calls[0][1][0].body
