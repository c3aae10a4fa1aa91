# petline/services/dispatcher.py
import logging
from dataclasses import dataclass
from typing import List, Sequence

from petline.models.message import MessagePart

# LINE multicast API의 요청당 최대 수신자 수
MULTICAST_MAX_RECIPIENTS = 500

@dataclass
class BroadcastResult:
    """브로드캐스트 결과 요약. 호출자에게 정보 제공용일 뿐 실패를 의미하지 않습니다."""
    recipients: int = 0
    delivered: int = 0
    failed: int = 0
    calls: int = 0


def chunked(items: Sequence[str], size: int) -> List[List[str]]:
    if size <= 0:
        raise ValueError("chunk size는 1 이상이어야 합니다.")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


class BroadcastDispatcher:
    """
    렌더링된 메시지를 등록된 가족 전원에게 보내는 서비스 클래스.
    최대 한 번(at-most-once), best-effort 전송이며 실패는 로그만 남기고 호출자에게 전파하지 않습니다.
    """
    def __init__(self, registry, line_client, chunk_size: int = MULTICAST_MAX_RECIPIENTS):
        if not isinstance(chunk_size, int) or isinstance(chunk_size, bool) or chunk_size < 1:
            raise ValueError(f"chunk_size는 1 이상의 정수여야 합니다: {chunk_size!r}")
        self.registry = registry
        self.line_client = line_client
        self.chunk_size = chunk_size

    def broadcast(self, parts: Sequence[MessagePart]) -> BroadcastResult:
        result = BroadcastResult()
        if not parts:
            logging.info("보낼 메시지 파트가 없어 브로드캐스트를 건너뜁니다.")
            return result

        try:
            user_ids = self.registry.list_all()
        except Exception as e:
            logging.error(f"LINE通知先の取得に失敗しました: {e}", exc_info=True)
            return result

        if not user_ids:
            logging.info("LINE通知先が登録されていません。")
            return result

        result.recipients = len(user_ids)
        for chunk in chunked(user_ids, self.chunk_size):
            result.calls += 1
            try:
                self.line_client.multicast(chunk, parts)
                result.delivered += len(chunk)
            except Exception as e:
                # 한 청크의 실패는 다른 청크 전송에 영향을 주지 않습니다. 재시도하지 않습니다.
                result.failed += len(chunk)
                logging.error(f"LINE送信エラー ({len(chunk)}人): {e}", exc_info=True)

        logging.info(f"{result.delivered}人にLINE通知を送信しました。(失敗: {result.failed}人)")
        return result
