# app/models/likeable.py
from abc import ABC, abstractmethod
from typing import List

class Likeable(ABC):
    """
    좋아요 집합(likes)을 가진 문서의 공통 인터페이스.
    Post와 Comment가 구현하며, LikeService는 이 인터페이스만 보고 동작합니다.
    """
    COLLECTION: str = ""
    likes: List[str]

    @property
    @abstractmethod
    def entity_id(self) -> str:
        """좋아요 집합이 저장된 문서의 ID"""

    def is_liked_by(self, user_id: str) -> bool:
        return user_id in self.likes
