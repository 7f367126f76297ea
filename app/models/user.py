# app/models/user.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from app.models.media import MediaRef, EMPTY_MEDIA

@dataclass
class SocialLinks:
    facebook: str = ""
    instagram: str = ""
    twitter: str = ""

@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    followers / following 은 팔로우 그래프의 양방향 뷰이며 항상 서로 대칭이어야 합니다.
    """
    COLLECTION = 'users'

    user_id: str
    username: str
    email: str
    name: str
    password_hash: str
    bio: str = ""
    social_links: SocialLinks = field(default_factory=SocialLinks)
    profile_image: MediaRef = EMPTY_MEDIA
    cover_image: MediaRef = EMPTY_MEDIA
    followers: List[str] = field(default_factory=list)
    following: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "email": self.email,
            "name": self.name,
            # 이름 접두어 검색용 (Firestore 범위 조건은 대소문자를 구분함)
            "name_lower": self.name.lower(),
            "password_hash": self.password_hash,
            "bio": self.bio,
            "social_links": {
                "facebook": self.social_links.facebook,
                "instagram": self.social_links.instagram,
                "twitter": self.social_links.twitter,
            },
            "profile_image": self.profile_image.to_dict(),
            "cover_image": self.cover_image.to_dict(),
            "followers": list(self.followers),
            "following": list(self.following),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        links = data.get("social_links") or {}
        return cls(
            user_id=data["user_id"],
            username=data.get("username", ""),
            email=data.get("email", ""),
            name=data.get("name", ""),
            password_hash=data.get("password_hash", ""),
            bio=data.get("bio") or "",
            social_links=SocialLinks(**{k: links.get(k) or "" for k in ("facebook", "instagram", "twitter")}),
            profile_image=MediaRef.from_dict(data.get("profile_image")),
            cover_image=MediaRef.from_dict(data.get("cover_image")),
            followers=list(data.get("followers") or []),
            following=list(data.get("following") or []),
            created_at=data.get("created_at"),
        )

    def summary(self) -> Dict[str, Any]:
        """게시물/댓글 작성자 정보로 조인되는 공개 정보."""
        return {
            "user_id": self.user_id,
            "username": self.username,
            "name": self.name,
            "profile_image_url": self.profile_image.url or None,
        }
