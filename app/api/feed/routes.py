# app/api/feed/routes.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from app.api.feed.schemas import FeedQuerySchema
from app.api.posts.schemas import PostResponseSchema

feed_bp = Blueprint('feed_bp', __name__)

@feed_bp.route('', methods=['GET'])
@jwt_required()
def get_home_feed():
    """
    홈 피드: 내가 팔로우하는 사용자들과 나의 게시물을 최신순으로 10개씩 조회합니다.
    ?page=1 부터 시작합니다.
    """
    feed_service = current_app.services['feed']
    try:
        query = FeedQuerySchema().load(request.args.to_dict())
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    posts = feed_service.get_home_feed(get_jwt_identity(), query['page'])
    return jsonify({"posts": PostResponseSchema(many=True).dump(posts), "page": query['page']}), 200


@feed_bp.route('/users/<string:user_id>', methods=['GET'])
@jwt_required()
def get_profile_feed(user_id: str):
    """프로필 피드: 특정 사용자가 작성한 게시물을 최신순으로 10개씩 조회합니다."""
    feed_service = current_app.services['feed']
    try:
        query = FeedQuerySchema().load(request.args.to_dict())
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    posts = feed_service.get_profile_feed(user_id, query['page'], viewer_id=get_jwt_identity())
    return jsonify({"posts": PostResponseSchema(many=True).dump(posts), "page": query['page']}), 200
