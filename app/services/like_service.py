# app/services/like_service.py
import logging

from app.models.likeable import Likeable
from app.services.document_store import DocumentStore

class LikeService:
    """
    게시물과 댓글의 좋아요 집합을 관리합니다.
    좋아요는 카운터가 아니라 사용자 ID 집합이므로, 같은 요청을 몇 번 반복해도 결과가 같습니다.
    Firestore의 ArrayUnion / ArrayRemove 는 서로 교환 가능(commutative)하므로
    동시에 들어온 여러 사용자의 토글도 도착 순서대로 안전하게 반영됩니다.
    """
    def __init__(self, document_store: DocumentStore):
        self.store = document_store

    def toggle_like(self, entity: Likeable, actor_id: str, desired: bool) -> bool:
        """
        desired=True 이면 좋아요 집합에 추가, False 이면 제거합니다.
        이미 원하는 상태라도 오류 없이 같은 결과를 반환합니다.

        :return: 토글 이후 actor 의 좋아요 여부
        """
        if desired:
            self.store.add_to_set(entity.COLLECTION, entity.entity_id, 'likes', actor_id)
        else:
            self.store.remove_from_set(entity.COLLECTION, entity.entity_id, 'likes', actor_id)
        logging.info(f"좋아요 {'추가' if desired else '취소'}: {entity.COLLECTION}/{entity.entity_id} by {actor_id}")
        return desired
