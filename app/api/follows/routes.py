# app/api/follows/routes.py
from flask import Blueprint, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

from app.api.users.schemas import UserSummarySchema

follows_bp = Blueprint('follows_bp', __name__)

@follows_bp.route('/<string:user_id>/follow', methods=['PUT'])
@jwt_required()
def follow_user(user_id: str):
    """
    현재 로그인된 사용자가 user_id 사용자를 팔로우합니다.
    이미 팔로우 중이어도 오류 없이 200을 반환합니다.
    """
    current_app.services['follows'].follow(get_jwt_identity(), user_id)
    return jsonify({"following": True}), 200


@follows_bp.route('/<string:user_id>/follow', methods=['DELETE'])
@jwt_required()
def unfollow_user(user_id: str):
    """user_id 사용자를 언팔로우합니다. 팔로우 중이 아니어도 오류 없이 200을 반환합니다."""
    current_app.services['follows'].unfollow(get_jwt_identity(), user_id)
    return jsonify({"following": False}), 200


@follows_bp.route('/<string:user_id>/followers', methods=['GET'])
@jwt_required()
def get_followers(user_id: str):
    follow_service = current_app.services['follows']
    user_service = current_app.services['users']
    follower_ids = follow_service.list_followers(user_id)
    summaries = user_service.get_summaries(follower_ids)
    users = [summaries[uid] for uid in follower_ids if uid in summaries]
    return jsonify({"users": UserSummarySchema(many=True).dump(users)}), 200


@follows_bp.route('/<string:user_id>/following', methods=['GET'])
@jwt_required()
def get_following(user_id: str):
    follow_service = current_app.services['follows']
    user_service = current_app.services['users']
    following_ids = follow_service.list_following(user_id)
    summaries = user_service.get_summaries(following_ids)
    users = [summaries[uid] for uid in following_ids if uid in summaries]
    return jsonify({"users": UserSummarySchema(many=True).dump(users)}), 200
