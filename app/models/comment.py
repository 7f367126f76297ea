# app/models/comment.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from app.models.likeable import Likeable
from app.models.media import MediaRef, EMPTY_MEDIA

@dataclass
class Comment(Likeable):
    """
    Firestore 'comments' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    post_id 는 게시물 삭제 시 댓글을 함께 찾기 위한 역참조입니다.
    """
    COLLECTION = 'comments'

    comment_id: str
    post_id: str
    author_id: str
    text: str = ""
    image: MediaRef = EMPTY_MEDIA
    likes: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None

    @property
    def entity_id(self) -> str:
        return self.comment_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "comment_id": self.comment_id,
            "post_id": self.post_id,
            "author_id": self.author_id,
            "text": self.text,
            "image": self.image.to_dict(),
            "likes": list(self.likes),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        return cls(
            comment_id=data["comment_id"],
            post_id=data.get("post_id", ""),
            author_id=data["author_id"],
            text=data.get("text") or "",
            image=MediaRef.from_dict(data.get("image")),
            likes=list(data.get("likes") or []),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
