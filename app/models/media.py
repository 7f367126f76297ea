# app/models/media.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any

class MediaKind(Enum):
    """Storage에 저장되는 미디어 종류"""
    IMAGE = "image"
    VIDEO = "video"

@dataclass(frozen=True)
class MediaRef:
    """
    Storage에 저장된 파일 하나를 가리키는 참조 (공개 URL + 삭제용 핸들).
    url과 handle은 항상 둘 다 있거나 둘 다 비어 있어야 합니다.
    """
    url: str = ""
    handle: str = ""
    kind: MediaKind = MediaKind.IMAGE

    def __post_init__(self):
        if bool(self.url) != bool(self.handle):
            raise ValueError("MediaRef의 url과 handle은 함께 설정되거나 함께 비어 있어야 합니다.")

    @property
    def is_empty(self) -> bool:
        return not self.handle

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "handle": self.handle, "kind": self.kind.value}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MediaRef":
        """Firestore 문서의 맵 필드로부터 MediaRef를 만듭니다. 값이 없으면 빈 참조를 반환합니다."""
        if not data:
            return EMPTY_MEDIA
        return cls(
            url=data.get("url") or "",
            handle=data.get("handle") or "",
            kind=MediaKind(data.get("kind") or MediaKind.IMAGE.value),
        )

EMPTY_MEDIA = MediaRef()

@dataclass(frozen=True)
class MediaUpload:
    """업로드 요청으로 들어온 파일 (multipart 디코딩은 라우트 계층에서 끝난 상태)."""
    data: bytes
    kind: MediaKind = MediaKind.IMAGE
    content_type: Optional[str] = None
    filename: Optional[str] = None
