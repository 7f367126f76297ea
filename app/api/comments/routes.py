# app/api/comments/routes.py
from flask import Blueprint, request, jsonify, Response, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from app.api.comments.schemas import CommentCreateSchema, CommentUpdateSchema, CommentResponseSchema
from app.api.posts.schemas import LikeToggleSchema
from app.utils.uploads import media_upload_from_request


comments_bp = Blueprint('comments_bp', __name__)

@comments_bp.route('/<string:post_id>/comments', methods=['POST'])
@jwt_required()
def create_comment(post_id: str):
    """
    특정 게시글에 새로운 댓글을 작성합니다. (multipart/form-data, 이미지는 'commentImage')
    - 성공 시, 작성자 정보가 포함된 댓글을 201 Created 상태 코드와 함께 반환합니다.
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        data = CommentCreateSchema().load(request.form.to_dict())
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    new_comment = comment_service.add_comment(
        post_id, user_id,
        text=data['text'],
        image=media_upload_from_request('commentImage', kind='image'),
    )
    return jsonify(CommentResponseSchema().dump(new_comment)), 201


@comments_bp.route('/<string:post_id>/comments/<string:comment_id>', methods=['GET'])
@jwt_required()
def get_comment(post_id: str, comment_id: str):
    """특정 댓글을 작성자 정보와 좋아요 목록과 함께 조회합니다."""
    comment_service = current_app.services['comments']
    user_service = current_app.services['users']
    feed_service = current_app.services['feed']
    user_id = get_jwt_identity()

    comment = comment_service.get_comment(comment_id, post_id)
    authors = user_service.get_summaries([comment.author_id])
    return jsonify(CommentResponseSchema().dump(feed_service.comment_view(comment, authors, user_id))), 200


@comments_bp.route('/<string:post_id>/comments/<string:comment_id>', methods=['PATCH'])
@jwt_required()
def update_comment(post_id: str, comment_id: str):
    """댓글의 텍스트나 이미지를 수정합니다. (작성자 본인만 가능)"""
    comment_service = current_app.services['comments']
    user_service = current_app.services['users']
    feed_service = current_app.services['feed']
    user_id = get_jwt_identity()
    try:
        data = CommentUpdateSchema().load(request.form.to_dict())
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    comment = comment_service.update_comment(
        comment_id, user_id,
        text=data['text'],
        image=media_upload_from_request('commentImage', kind='image'),
        post_id=post_id,
    )
    authors = user_service.get_summaries([comment.author_id])
    return jsonify(CommentResponseSchema().dump(feed_service.comment_view(comment, authors, user_id))), 200


@comments_bp.route('/<string:post_id>/comments/<string:comment_id>', methods=['DELETE'])
@jwt_required()
def delete_comment(post_id: str, comment_id: str):
    """
    특정 댓글을 삭제합니다. (댓글 작성자 또는 게시물 작성자만 가능)
    - 댓글 이미지가 함께 삭제되고, 게시물의 댓글 목록에서 제거됩니다.
    """
    comment_service = current_app.services['comments']
    comment_service.delete_comment(post_id, comment_id, get_jwt_identity())
    return Response(status=204)


@comments_bp.route('/<string:post_id>/comments/<string:comment_id>/like', methods=['PUT'])
@jwt_required()
def toggle_comment_like(post_id: str, comment_id: str):
    """
    특정 댓글의 좋아요를 설정합니다. 본문의 liked 값이 최종 상태입니다.
    """
    comment_service = current_app.services['comments']
    try:
        data = LikeToggleSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    liked = comment_service.toggle_like(comment_id, get_jwt_identity(), data['liked'], post_id=post_id)
    return jsonify({"comment_id": comment_id, "liked": liked}), 200
