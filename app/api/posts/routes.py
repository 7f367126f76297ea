# app/api/posts/routes.py
from flask import Blueprint, request, jsonify, Response, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from app.api.posts.schemas import PostCreateSchema, PostUpdateSchema, PostResponseSchema, LikeToggleSchema
from app.utils.uploads import media_upload_from_request


posts_bp = Blueprint('posts_bp', __name__)

@posts_bp.route('', methods=['POST'])
@jwt_required()
def create_post():
    """
    새로운 게시글을 생성합니다. (multipart/form-data)
    - 'media' 파일 필드(이미지/동영상)와 text 중 하나는 있어야 합니다.
    - 성공 시, 작성자 정보가 조인된 게시글을 201 Created 상태 코드와 함께 반환합니다.
    """
    post_service = current_app.services['posts']
    feed_service = current_app.services['feed']
    user_id = get_jwt_identity()
    try:
        data = PostCreateSchema().load(request.form.to_dict())
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    new_post = post_service.create_post(
        user_id,
        text=data['text'],
        location=data['location'],
        media=media_upload_from_request('media', kind=data['media_type']),
    )
    return jsonify(PostResponseSchema().dump(feed_service.get_post(new_post.post_id, user_id))), 201


@posts_bp.route('/<string:post_id>', methods=['GET'])
@jwt_required()
def get_post(post_id: str):
    """특정 게시글의 상세 정보(작성자, 좋아요, 댓글 포함)를 조회합니다."""
    feed_service = current_app.services['feed']
    post = feed_service.get_post(post_id, get_jwt_identity())
    return jsonify(PostResponseSchema().dump(post)), 200


@posts_bp.route('/<string:post_id>', methods=['PATCH'])
@jwt_required()
def update_post(post_id: str):
    """
    특정 게시글의 텍스트, 위치, 미디어를 수정합니다. (작성자 본인만 가능)
    새 미디어가 오면 교체가 끝난 뒤 이전 미디어를 삭제합니다.
    """
    post_service = current_app.services['posts']
    feed_service = current_app.services['feed']
    user_id = get_jwt_identity()
    try:
        data = PostUpdateSchema().load(request.form.to_dict())
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    post_service.update_post(
        post_id, user_id,
        text=data['text'],
        location=data['location'],
        media=media_upload_from_request('media', kind=data['media_type']),
    )
    return jsonify(PostResponseSchema().dump(feed_service.get_post(post_id, user_id))), 200


@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@jwt_required()
def delete_post(post_id: str):
    """
    특정 게시글을 삭제합니다. (작성자 본인만 가능)
    게시글의 미디어와 댓글(댓글 이미지 포함)도 함께 삭제됩니다.
    """
    post_service = current_app.services['posts']
    post_service.delete_post(post_id, get_jwt_identity())
    return Response(status=204) # 성공 시 내용 없이 204 No Content 반환


@posts_bp.route('/<string:post_id>/like', methods=['PUT'])
@jwt_required()
def toggle_post_like(post_id: str):
    """
    게시글 좋아요를 설정합니다. 본문의 liked 값이 최종 상태이며, 같은 요청을 반복해도 결과가 같습니다.
    """
    post_service = current_app.services['posts']
    try:
        data = LikeToggleSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    liked = post_service.toggle_like(post_id, get_jwt_identity(), data['liked'])
    return jsonify({"post_id": post_id, "liked": liked}), 200
