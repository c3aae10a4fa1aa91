# petline/services/line_client.py

import base64
import hashlib
import hmac
from typing import Any, Dict, Optional, Sequence

import requests

from petline.models.message import MessagePart

class LineApiError(Exception):
    """LINE Messaging API 호출이 실패했을 때 발생하는 예외."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class LineMessagingClient:
    """실제 LINE Messaging API 통신을 담당하는 서비스 클래스입니다."""
    _api_base_url = "https://api.line.me/v2/bot"

    def __init__(self, channel_access_token: str, channel_secret: Optional[str] = None,
                 timeout: float = 10.0, session: Optional[requests.Session] = None):
        if not channel_access_token:
            raise ValueError("LINE_CHANNEL_ACCESS_TOKEN is not configured.")
        self.channel_secret = channel_secret
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {channel_access_token}",
            "Content-Type": "application/json",
        })

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self._api_base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise LineApiError(f"LINE API 요청 실패 ({method} {path}): {e}") from e

        if response.status_code >= 400:
            try:
                details = response.json()
            except ValueError:
                details = response.text
            raise LineApiError(
                f"LINE API 오류 응답 ({method} {path}): {response.status_code}",
                status_code=response.status_code,
                details=details
            )
        return response

    def multicast(self, user_ids: Sequence[str], parts: Sequence[MessagePart]) -> None:
        """
        여러 사용자에게 같은 메시지를 한 번에 보냅니다.

        :param user_ids: 수신자 LINE user id 목록 (LINE 제한: 요청당 최대 500명)
        :param parts: 순서 있는 메시지 파트 (요청당 최대 5개)
        :raises LineApiError: 전송 실패 시
        """
        payload = {
            "to": list(user_ids),
            "messages": [part.to_line() for part in parts],
        }
        self._request("POST", "/message/multicast", json=payload)

    def get_profile(self, user_id: str) -> Dict[str, Any]:
        """
        사용자 프로필(displayName 등)을 조회합니다.

        :raises LineApiError: 조회 실패 시 (친구가 아닌 사용자 등)
        """
        response = self._request("GET", f"/profile/{user_id}")
        return response.json()

    def verify_signature(self, body: bytes, signature: Optional[str]) -> bool:
        """X-Line-Signature 헤더 값을 채널 시크릿으로 검증합니다."""
        if not self.channel_secret or not signature:
            return False
        digest = hmac.new(self.channel_secret.encode('utf-8'), body, hashlib.sha256).digest()
        expected = base64.b64encode(digest).decode('utf-8')
        return hmac.compare_digest(expected, signature)
