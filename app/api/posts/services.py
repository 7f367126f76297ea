# app/api/posts/services.py
import logging
import uuid
from typing import Optional, Dict, Any

from app.api.comments.services import CommentService
from app.core.exceptions import ForbiddenError, InvalidInputError, NoUpdateError, NotFoundError
from app.models.media import MediaRef, MediaUpload
from app.models.post import Post
from app.models.user import User
from app.services.document_store import DocumentStore
from app.services.like_service import LikeService
from app.services.media_lifecycle import MediaLifecycleCoordinator
from app.services.reconciliation import report_orphan_comments
from app.utils.datetime_utils import DateTimeUtils

class PostService:
    """
    게시글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 생성: 미디어 업로드 -> 게시글 문서 생성
    - 수정: 새 미디어 업로드 -> 게시글의 미디어 참조 교체 -> 이전 미디어 삭제
    - 삭제: 게시글 문서 삭제 -> 미디어 삭제 -> 댓글(및 댓글 이미지) 연쇄 삭제
    """
    def __init__(self, document_store: DocumentStore, media: MediaLifecycleCoordinator,
                 like_service: LikeService, comment_service: CommentService):
        self.store = document_store
        self.media = media
        self.like_service = like_service
        self.comment_service = comment_service

    def get_post(self, post_id: str) -> Post:
        data = self.store.get(Post.COLLECTION, post_id)
        if not data:
            raise NotFoundError("게시물을 찾을 수 없습니다.")
        return Post.from_dict(data)

    def _get_own_post(self, post_id: str, actor_id: str) -> Post:
        post = self.get_post(post_id)
        if post.author_id != actor_id:
            raise ForbiddenError("게시물을 수정하거나 삭제할 권한이 없습니다.")
        return post

    def create_post(self, author_id: str, text: Optional[str] = None, location: Optional[str] = None,
                    media: Optional[MediaUpload] = None) -> Post:
        """새로운 게시글을 생성합니다. 텍스트와 미디어 중 하나는 반드시 있어야 합니다."""
        text = (text or "").strip()
        if not text and not media:
            raise InvalidInputError("게시글 내용이나 미디어 중 하나는 입력해야 합니다.")
        if not self.store.get(User.COLLECTION, author_id):
            raise NotFoundError("게시글 작성자를 찾을 수 없습니다.")

        post_id = str(uuid.uuid4())

        def _create(ref: MediaRef) -> Post:
            new_post = Post(
                post_id=post_id,
                author_id=author_id,
                text=text,
                media=ref,
                location=location or "",
                created_at=DateTimeUtils.now(),
            )
            self.store.create(Post.COLLECTION, post_id, new_post.to_dict())
            return new_post

        post = self.media.create_with_asset(media, "post_media", author_id, _create)
        logging.info(f"게시글 생성 완료 (post_id: {post_id}, author: {author_id})")
        return post

    def update_post(self, post_id: str, actor_id: str, text: Optional[str] = None,
                    location: Optional[str] = None, media: Optional[MediaUpload] = None) -> Post:
        """
        게시글의 텍스트, 위치, 미디어를 수정합니다. (작성자 본인만 가능)
        미디어가 함께 오면 텍스트 변경은 미디어 참조 교체와 같은 트랜잭션으로 기록됩니다.
        """
        text = (text or "").strip()
        location = (location or "").strip()
        if not text and not location and not media:
            raise NoUpdateError("수정할 내용이 전달되지 않았습니다.")
        self._get_own_post(post_id, actor_id)

        update_data: Dict[str, Any] = {"updated_at": DateTimeUtils.now()}
        if text:
            update_data["text"] = text
        if location:
            update_data["location"] = location

        if media:
            def _swap(new_ref: MediaRef) -> MediaRef:
                previous = self.store.swap_field(Post.COLLECTION, post_id, "media", new_ref.to_dict(),
                                                 extra_fields=update_data)
                return MediaRef.from_dict(previous)

            self.media.replace_asset(_swap, media, "post_media", actor_id)
        else:
            self.store.update(Post.COLLECTION, post_id, update_data)

        logging.info(f"게시글 수정 완료 (post_id: {post_id}, fields: {list(update_data.keys())}, media: {bool(media)})")
        return self.get_post(post_id)

    def delete_post(self, post_id: str, actor_id: str) -> int:
        """
        게시글을 삭제합니다. (작성자 본인만 가능)
        게시글 문서 삭제 후 미디어를 지우고, 이 게시글에 달린 댓글과 댓글 이미지를 각각 독립적으로 삭제합니다.
        :return: 함께 삭제된 댓글 수
        """
        self._get_own_post(post_id, actor_id)

        def _delete() -> Optional[MediaRef]:
            deleted = self.store.delete(Post.COLLECTION, post_id)
            return MediaRef.from_dict(deleted.get("media")) if deleted is not None else None

        self.media.delete_owner(_delete)

        # 게시글 삭제는 이미 커밋된 상태. 이후 단계의 실패는 reconciliation 으로 넘김
        try:
            deleted_comments = self.comment_service.delete_comments_for_post(post_id)
        except Exception as e:
            logging.error(f"게시글 삭제 후 댓글 정리 실패 (post_id: {post_id}): {e}", exc_info=True)
            report_orphan_comments(post_id, e)
            deleted_comments = 0
        logging.info(f"게시글 삭제 완료 (post_id: {post_id}, 삭제된 댓글: {deleted_comments})")
        return deleted_comments

    def toggle_like(self, post_id: str, actor_id: str, desired: bool) -> bool:
        """게시글 좋아요를 추가(desired=True)하거나 취소(desired=False)합니다."""
        post = self.get_post(post_id)
        return self.like_service.toggle_like(post, actor_id, desired)
