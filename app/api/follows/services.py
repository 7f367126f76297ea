# app/api/follows/services.py
import logging
from typing import List

from app.core.exceptions import InvalidInputError, NotFoundError
from app.models.user import User
from app.services.document_store import DocumentStore
from app.services.reconciliation import report_graph_asymmetry

class FollowService:
    """
    팔로우 그래프를 관리하는 서비스 클래스.

    A가 B를 팔로우하면 'A ∈ B.followers' 와 'B ∈ A.following' 이 함께 성립해야 합니다.
    두 사용자 문서를 하나의 트랜잭션으로 묶지 않고 아래 순서로 각각 커밋합니다.
      1. 대상(target)의 followers 갱신
      2. 팔로워(follower)의 following 갱신
    1단계가 실패하면 아무것도 바뀌지 않은 채 예외가 전달됩니다.
    2단계가 실패하면 1단계는 이미 커밋된 상태이므로 비대칭을 reconciliation 로그에 남기고 성공으로 처리합니다.
    두 단계 모두 집합 연산(ArrayUnion / ArrayRemove)이라 같은 요청을 다시 보내도 안전합니다.
    """
    def __init__(self, document_store: DocumentStore):
        self.store = document_store

    def _validate_pair(self, follower_id: str, target_id: str) -> None:
        if follower_id == target_id:
            raise InvalidInputError("자기 자신을 팔로우하거나 언팔로우할 수 없습니다.")
        users = self.store.get_many(User.COLLECTION, [follower_id, target_id])
        if target_id not in users:
            raise NotFoundError("팔로우 대상 사용자를 찾을 수 없습니다.")
        if follower_id not in users:
            raise NotFoundError("팔로우하는 사용자를 찾을 수 없습니다.")

    def follow(self, follower_id: str, target_id: str) -> None:
        self._validate_pair(follower_id, target_id)

        self.store.add_to_set(User.COLLECTION, target_id, 'followers', follower_id)
        try:
            self.store.add_to_set(User.COLLECTION, follower_id, 'following', target_id)
        except Exception as e:
            logging.error(f"팔로우 2단계(following) 갱신 실패 ({follower_id} -> {target_id}): {e}", exc_info=True)
            report_graph_asymmetry(follower_id, target_id, committed_side='followers', error=e)
            return
        logging.info(f"팔로우 완료: {follower_id} -> {target_id}")

    def unfollow(self, follower_id: str, target_id: str) -> None:
        self._validate_pair(follower_id, target_id)

        self.store.remove_from_set(User.COLLECTION, target_id, 'followers', follower_id)
        try:
            self.store.remove_from_set(User.COLLECTION, follower_id, 'following', target_id)
        except Exception as e:
            logging.error(f"언팔로우 2단계(following) 갱신 실패 ({follower_id} -> {target_id}): {e}", exc_info=True)
            report_graph_asymmetry(follower_id, target_id, committed_side='followers', error=e)
            return
        logging.info(f"언팔로우 완료: {follower_id} -> {target_id}")

    def list_followers(self, user_id: str) -> List[str]:
        data = self.store.get(User.COLLECTION, user_id)
        if not data:
            raise NotFoundError("사용자를 찾을 수 없습니다.")
        return list(data.get('followers') or [])

    def list_following(self, user_id: str) -> List[str]:
        data = self.store.get(User.COLLECTION, user_id)
        if not data:
            raise NotFoundError("사용자를 찾을 수 없습니다.")
        return list(data.get('following') or [])
