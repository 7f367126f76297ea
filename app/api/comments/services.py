# app/api/comments/services.py

import logging
import uuid
from typing import Optional, Dict, Any

from app.api.users.services import UserService
from app.core.exceptions import ForbiddenError, InvalidInputError, NoUpdateError, NotFoundError
from app.models.comment import Comment
from app.models.media import MediaRef, MediaUpload
from app.models.post import Post
from app.services.document_store import DocumentStore
from app.services.like_service import LikeService
from app.services.media_lifecycle import MediaLifecycleCoordinator
from app.services.reconciliation import report_dangling_comment
from app.utils.datetime_utils import DateTimeUtils

class CommentService:
    """
    댓글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 댓글은 별도 'comments' 문서로 저장되고, 게시물의 comment_ids 배열이 표시 순서를 가집니다.
    - 댓글 문서의 post_id 는 게시물 삭제 시 댓글을 찾기 위한 역참조입니다.
    """
    def __init__(self, document_store: DocumentStore, media: MediaLifecycleCoordinator,
                 like_service: LikeService, user_service: UserService):
        self.store = document_store
        self.media = media
        self.like_service = like_service
        self.user_service = user_service

    def get_comment(self, comment_id: str, post_id: Optional[str] = None) -> Comment:
        data = self.store.get(Comment.COLLECTION, comment_id)
        if not data:
            raise NotFoundError("댓글을 찾을 수 없습니다.")
        comment = Comment.from_dict(data)
        if post_id is not None and comment.post_id != post_id:
            raise NotFoundError("해당 게시물에서 댓글을 찾을 수 없습니다.")
        return comment

    def _delete_comment_document(self, comment_id: str):
        def _delete() -> Optional[MediaRef]:
            deleted = self.store.delete(Comment.COLLECTION, comment_id)
            return MediaRef.from_dict(deleted.get("image")) if deleted is not None else None
        return _delete

    def add_comment(self, post_id: str, author_id: str, text: Optional[str] = None,
                    image: Optional[MediaUpload] = None) -> Dict[str, Any]:
        """
        새로운 댓글을 작성합니다.
        이미지 업로드 -> 댓글 문서 생성 -> 게시물 comment_ids 맨 뒤에 추가 순서로 진행합니다.
        마지막 단계가 실패하면 만들어 둔 댓글 문서와 이미지를 지우고 예외를 다시 발생시킵니다.
        """
        text = (text or "").strip()
        if not text and not image:
            raise InvalidInputError("댓글 내용이나 이미지 중 하나는 입력해야 합니다.")
        if not self.store.get(Post.COLLECTION, post_id):
            raise NotFoundError("댓글을 작성할 게시물이 존재하지 않습니다.")

        comment_id = str(uuid.uuid4())

        def _create(ref: MediaRef) -> Comment:
            new_comment = Comment(
                comment_id=comment_id,
                post_id=post_id,
                author_id=author_id,
                text=text,
                image=ref,
                created_at=DateTimeUtils.now(),
            )
            self.store.create(Comment.COLLECTION, comment_id, new_comment.to_dict())
            return new_comment

        comment = self.media.create_with_asset(image, "comment_image", author_id, _create)

        try:
            self.store.add_to_set(Post.COLLECTION, post_id, "comment_ids", comment_id)
        except Exception as e:
            logging.error(f"게시물에 댓글 연결 실패 (post_id: {post_id}, comment_id: {comment_id}): {e}", exc_info=True)
            try:
                self.media.delete_owner(self._delete_comment_document(comment_id))
            except Exception as cleanup_error:
                logging.error(f"연결되지 않은 댓글 정리 실패 (comment_id: {comment_id}): {cleanup_error}", exc_info=True)
            raise

        logging.info(f"댓글 생성 완료 (post_id: {post_id}, comment_id: {comment_id})")
        comment_data = comment.to_dict()
        comment_data["author"] = self.user_service.get_summaries([author_id]).get(author_id)
        return comment_data

    def update_comment(self, comment_id: str, actor_id: str, text: Optional[str] = None,
                       image: Optional[MediaUpload] = None, post_id: Optional[str] = None) -> Comment:
        """
        댓글을 수정합니다. (작성자 본인만 가능)
        새 이미지는 댓글이 새 이미지를 가리키도록 바꾼 뒤에 이전 이미지를 삭제합니다.
        """
        text = (text or "").strip()
        if not text and not image:
            raise NoUpdateError("수정할 내용이 전달되지 않았습니다.")
        comment = self.get_comment(comment_id, post_id)
        if comment.author_id != actor_id:
            raise ForbiddenError("댓글을 수정할 권한이 없습니다.")

        update_data: Dict[str, Any] = {"updated_at": DateTimeUtils.now()}
        if text:
            update_data["text"] = text

        if image:
            def _swap(new_ref: MediaRef) -> MediaRef:
                previous = self.store.swap_field(Comment.COLLECTION, comment_id, "image", new_ref.to_dict(),
                                                 extra_fields=update_data)
                return MediaRef.from_dict(previous)

            self.media.replace_asset(_swap, image, "comment_image", actor_id)
        else:
            self.store.update(Comment.COLLECTION, comment_id, update_data)

        return self.get_comment(comment_id)

    def delete_comment(self, post_id: str, comment_id: str, actor_id: str) -> None:
        """
        댓글을 삭제합니다. (댓글 작성자 또는 게시물 작성자만 가능)
        댓글 문서 삭제 -> 이미지 삭제 -> 게시물 comment_ids 에서 제거 순서로 진행합니다.
        """
        comment = self.get_comment(comment_id, post_id)
        if comment.author_id != actor_id:
            post_data = self.store.get(Post.COLLECTION, post_id)
            if not post_data or post_data.get("author_id") != actor_id:
                raise ForbiddenError("댓글을 삭제할 권한이 없습니다.")

        self.media.delete_owner(self._delete_comment_document(comment_id))

        try:
            self.store.remove_from_set(Post.COLLECTION, post_id, "comment_ids", comment_id)
        except NotFoundError:
            logging.warning(f"댓글 삭제 중 게시물이 이미 삭제됨 (post_id: {post_id})")
        except Exception as e:
            logging.error(f"게시물에서 댓글 ID 제거 실패 (post_id: {post_id}, comment_id: {comment_id}): {e}")
            report_dangling_comment(post_id, comment_id, e)
        logging.info(f"댓글 삭제 완료 (post_id: {post_id}, comment_id: {comment_id})")

    def delete_comments_for_post(self, post_id: str) -> int:
        """
        삭제된 게시물에 달려 있던 댓글과 그 이미지를 삭제합니다.
        각 댓글은 독립적으로 처리되어, 하나의 실패가 나머지 삭제를 막지 않습니다.
        :return: 삭제된 댓글 수
        """
        comments = self.store.find(Comment.COLLECTION, filters=[("post_id", "==", post_id)])
        deleted = 0
        for data in comments:
            comment_id = data["comment_id"]
            try:
                if self.media.delete_owner(self._delete_comment_document(comment_id)) is not None:
                    deleted += 1
            except Exception as e:
                logging.error(f"게시물 삭제에 따른 댓글 삭제 실패 (comment_id: {comment_id}): {e}", exc_info=True)
        return deleted

    def toggle_like(self, comment_id: str, actor_id: str, desired: bool, post_id: Optional[str] = None) -> bool:
        """댓글 좋아요를 추가(desired=True)하거나 취소(desired=False)합니다."""
        comment = self.get_comment(comment_id, post_id)
        return self.like_service.toggle_like(comment, actor_id, desired)
