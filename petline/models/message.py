# petline/models/message.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

# LINE은 한 요청에 메시지 객체를 최대 5개까지 허용합니다 (텍스트 1 + 이미지 4).
MAX_IMAGE_PARTS = 4

@dataclass(frozen=True)
class TextPart:
    body: str

    def to_line(self) -> Dict[str, Any]:
        return {"type": "text", "text": self.body}

@dataclass(frozen=True)
class ImagePart:
    url: str

    def to_line(self) -> Dict[str, Any]:
        # 원본과 미리보기 모두 같은 URL을 사용
        return {"type": "image", "originalContentUrl": self.url, "previewImageUrl": self.url}

MessagePart = Union[TextPart, ImagePart]

@dataclass
class RenderedMessage:
    """
    포매터가 만든 메시지 파트의 순서 있는 목록.
    첫 파트는 항상 텍스트 요약이고, 이미지 파트가 최대 4개까지 뒤따릅니다.
    파트가 비어 있으면 '보낼 메시지 없음'을 뜻합니다.
    """
    parts: List[MessagePart] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.parts

    @property
    def text(self) -> str:
        return self.parts[0].body if self.parts and isinstance(self.parts[0], TextPart) else ''

    @property
    def images(self) -> List[ImagePart]:
        return [p for p in self.parts if isinstance(p, ImagePart)]
