# app/models/post.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from app.models.likeable import Likeable
from app.models.media import MediaRef, EMPTY_MEDIA

@dataclass
class Post(Likeable):
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    - author_id 는 생성 후 변경되지 않습니다.
    - likes 는 중복 없는 사용자 ID 집합, comment_ids 는 작성 순서(표시 순서)를 유지합니다.
    """
    COLLECTION = 'posts'

    post_id: str
    author_id: str
    text: str = ""
    media: MediaRef = EMPTY_MEDIA
    location: str = ""
    likes: List[str] = field(default_factory=list)
    comment_ids: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None

    @property
    def entity_id(self) -> str:
        return self.post_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "post_id": self.post_id,
            "author_id": self.author_id,
            "text": self.text,
            "media": self.media.to_dict(),
            "location": self.location,
            "likes": list(self.likes),
            "comment_ids": list(self.comment_ids),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        return cls(
            post_id=data["post_id"],
            author_id=data["author_id"],
            text=data.get("text") or "",
            media=MediaRef.from_dict(data.get("media")),
            location=data.get("location") or "",
            likes=list(data.get("likes") or []),
            comment_ids=list(data.get("comment_ids") or []),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
