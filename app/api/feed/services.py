# app/api/feed/services.py
"""
타임라인(피드) 조회 서비스.

- 프로필 피드: 한 작성자의 게시물
- 홈 피드: 내가 팔로우하는 사용자들과 나 자신(audience)의 게시물

두 피드 모두 created_at 내림차순, 같은 시각이면 post_id 내림차순으로 정렬하고
페이지당 10개씩(page 1 = offset 0) 잘라서 반환합니다.
각 게시물에는 작성자 정보, 좋아요 집합, 댓글(작성자/좋아요 포함)이 조인됩니다.
작성자나 댓글 작성자가 삭제된 경우 author 는 None 으로 채워지며, 페이지 전체가 실패하지 않습니다.
"""

import logging
from typing import Optional, Dict, Any, List

from app.api.users.services import UserService
from app.core.exceptions import InvalidInputError, NotFoundError
from app.models.comment import Comment
from app.models.post import Post
from app.models.user import User
from app.services.document_store import DocumentStore, IN_QUERY_LIMIT

logger = logging.getLogger(__name__)

PAGE_SIZE = 10


class FeedService:
    def __init__(self, document_store: DocumentStore, user_service: UserService):
        self.store = document_store
        self.user_service = user_service

    @property
    def _post_order(self):
        return [("created_at", self.store.DESCENDING), ("post_id", self.store.DESCENDING)]

    @staticmethod
    def page_offset(page: int) -> int:
        """1부터 시작하는 페이지 번호를 건너뛸 문서 수로 바꿉니다."""
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise InvalidInputError("page는 1 이상의 정수여야 합니다.")
        return (page - 1) * PAGE_SIZE

    # --- 피드 ---
    def get_profile_feed(self, author_id: str, page: int, viewer_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """특정 사용자가 작성한 게시물 목록을 페이지 단위로 조회합니다."""
        offset = self.page_offset(page)
        posts = self.store.find(
            Post.COLLECTION,
            filters=[("author_id", "==", author_id)],
            order_by=self._post_order,
            offset=offset,
            limit=PAGE_SIZE,
        )
        return self._hydrate(posts, viewer_id)

    def get_home_feed(self, viewer_id: str, page: int) -> List[Dict[str, Any]]:
        """내가 팔로우하는 사용자들과 나의 게시물을 페이지 단위로 조회합니다."""
        offset = self.page_offset(page)
        viewer = self.store.get(User.COLLECTION, viewer_id)
        if not viewer:
            raise NotFoundError("사용자를 찾을 수 없습니다.")

        audience = list(dict.fromkeys(list(viewer.get("following") or []) + [viewer_id]))
        posts = self._find_posts_by_authors(audience, offset)
        return self._hydrate(posts, viewer_id)

    def get_post(self, post_id: str, viewer_id: Optional[str] = None) -> Dict[str, Any]:
        """게시물 한 건을 피드와 같은 형식으로 조회합니다."""
        data = self.store.get(Post.COLLECTION, post_id)
        if not data:
            raise NotFoundError("게시물을 찾을 수 없습니다.")
        return self._hydrate([data], viewer_id)[0]

    def _find_posts_by_authors(self, author_ids: List[str], offset: int) -> List[Dict[str, Any]]:
        """
        작성자 목록의 게시물을 조회합니다.
        Firestore 'in' 조건은 값 30개까지만 허용하므로, 그보다 많으면 30개씩 나눠 각각
        offset + PAGE_SIZE 개를 가져온 뒤 같은 정렬로 병합하여 페이지를 자릅니다.
        """
        chunks = [author_ids[i:i + IN_QUERY_LIMIT] for i in range(0, len(author_ids), IN_QUERY_LIMIT)]
        if len(chunks) == 1:
            return self.store.find(
                Post.COLLECTION,
                filters=[("author_id", "in", chunks[0])],
                order_by=self._post_order,
                offset=offset,
                limit=PAGE_SIZE,
            )

        candidates: List[Dict[str, Any]] = []
        for chunk in chunks:
            candidates.extend(self.store.find(
                Post.COLLECTION,
                filters=[("author_id", "in", chunk)],
                order_by=self._post_order,
                limit=offset + PAGE_SIZE,
            ))
        candidates.sort(key=lambda p: (p["created_at"], p["post_id"]), reverse=True)
        logger.debug(f"홈 피드 병합: audience {len(author_ids)}명, 청크 {len(chunks)}개, 후보 {len(candidates)}개")
        return candidates[offset:offset + PAGE_SIZE]

    # --- 조인 ---
    def _hydrate(self, post_docs: List[Dict[str, Any]], viewer_id: Optional[str]) -> List[Dict[str, Any]]:
        posts = [Post.from_dict(doc) for doc in post_docs]

        comment_docs = self.store.get_many(
            Comment.COLLECTION, [cid for post in posts for cid in post.comment_ids]
        )
        comments = {cid: Comment.from_dict(doc) for cid, doc in comment_docs.items()}

        user_ids = [post.author_id for post in posts] + [c.author_id for c in comments.values()]
        authors = self.user_service.get_summaries(user_ids)

        feed = []
        for post in posts:
            post_comments = [
                self.comment_view(comments[cid], authors, viewer_id)
                for cid in post.comment_ids if cid in comments
            ]
            feed.append({
                "post_id": post.post_id,
                "author": authors.get(post.author_id),
                "text": post.text,
                "media_url": post.media.url or None,
                "media_type": post.media.kind.value if not post.media.is_empty else None,
                "location": post.location,
                "likes": list(post.likes),
                "like_count": len(post.likes),
                "liked_by_viewer": post.is_liked_by(viewer_id) if viewer_id else False,
                "comments": post_comments,
                "comment_count": len(post_comments),
                "created_at": post.created_at,
                "updated_at": post.updated_at,
            })
        return feed

    @staticmethod
    def comment_view(comment: Comment, authors: Dict[str, Dict[str, Any]], viewer_id: Optional[str]) -> Dict[str, Any]:
        return {
            "comment_id": comment.comment_id,
            "post_id": comment.post_id,
            "author": authors.get(comment.author_id),
            "text": comment.text,
            "image_url": comment.image.url or None,
            "likes": list(comment.likes),
            "like_count": len(comment.likes),
            "liked_by_viewer": comment.is_liked_by(viewer_id) if viewer_id else False,
            "created_at": comment.created_at,
            "updated_at": comment.updated_at,
        }
