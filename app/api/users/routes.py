# app/api/users/routes.py
import logging
from flask import Blueprint, request, jsonify, Response, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from app.api.users.schemas import (
    UserCreateSchema, UsernameSchema, UserSearchSchema, ProfileUpdateSchema,
    UserSummarySchema, UserProfileResponseSchema
)
from app.utils.uploads import media_upload_from_request

users_bp = Blueprint('users_bp', __name__)

@users_bp.route('', methods=['POST'])
def register_user():
    """
    회원 가입 (multipart/form-data).
    - 'profileImage' 파일 필드가 있으면 업로드 후 프로필 이미지로 설정합니다.
    - username / email 이 이미 사용 중이면 409를 반환합니다.
    """
    user_service = current_app.services['users']
    try:
        data = UserCreateSchema().load(request.form.to_dict())
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    new_user = user_service.create_user(
        username=data['username'],
        email=data['email'],
        name=data['name'],
        password=data['password'],
        password_confirm=data['cpassword'],
        bio=data['bio'],
        social_links={k: data[k] for k in ('facebook', 'instagram', 'twitter')},
        profile_image=media_upload_from_request('profileImage'),
    )
    return jsonify(UserSummarySchema().dump(new_user.summary())), 201


@users_bp.route('/username', methods=['POST'])
def check_username():
    """사용자 이름 사용 가능 여부를 확인합니다."""
    user_service = current_app.services['users']
    try:
        data = UsernameSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    if not user_service.is_username_available(data['username']):
        return jsonify({"error_code": "USERNAME_TAKEN", "message": "이미 사용 중인 사용자 이름입니다."}), 409
    return jsonify({"message": "사용 가능한 사용자 이름입니다."}), 200


@users_bp.route('/search', methods=['GET'])
@jwt_required()
def search_users():
    """이름이 검색어로 시작하는 사용자 목록을 조회합니다."""
    user_service = current_app.services['users']
    try:
        query = UserSearchSchema().load(request.args.to_dict())
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    users = user_service.search_users(query['name'])
    return jsonify({"users": UserSummarySchema(many=True).dump(users)}), 200


@users_bp.route('/<string:user_id>', methods=['GET'])
@jwt_required()
def get_user_profile(user_id: str):
    """특정 사용자의 공개 프로필 정보(팔로워/팔로잉 목록 포함)를 조회합니다."""
    user_service = current_app.services['users']
    profile = user_service.get_profile(user_id)
    return jsonify(UserProfileResponseSchema().dump(profile)), 200


@users_bp.route('/me', methods=['PATCH'])
@jwt_required()
def update_my_profile():
    """현재 로그인된 사용자의 소개, 소셜 링크, 비밀번호를 수정합니다."""
    user_service = current_app.services['users']
    user_id = get_jwt_identity()
    try:
        data = ProfileUpdateSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    user_service.update_profile(
        user_id,
        bio=data.get('bio'),
        social_links=data.get('social_links'),
        password=data.get('password'),
        password_confirm=data.get('cpassword'),
    )
    return jsonify(UserProfileResponseSchema().dump(user_service.get_profile(user_id))), 200


def _replace_image(field_name: str, replace):
    upload = media_upload_from_request(field_name, kind='image')
    if upload is None:
        return jsonify({"error_code": "INVALID_PAYLOAD", "message": f"'{field_name}' 이미지 파일이 필요합니다."}), 400
    ref = replace(get_jwt_identity(), upload)
    logging.info(f"{field_name} 교체 완료 (user_id: {get_jwt_identity()})")
    return jsonify({"url": ref.url}), 200


@users_bp.route('/me/profile-image', methods=['PUT'])
@jwt_required()
def replace_my_profile_image():
    """프로필 이미지를 업로드하여 교체합니다. 이전 이미지는 교체가 끝난 뒤 삭제됩니다."""
    return _replace_image('profileImage', current_app.services['users'].replace_profile_image)


@users_bp.route('/me/profile-image', methods=['DELETE'])
@jwt_required()
def remove_my_profile_image():
    current_app.services['users'].remove_profile_image(get_jwt_identity())
    return Response(status=204)


@users_bp.route('/me/cover-image', methods=['PUT'])
@jwt_required()
def replace_my_cover_image():
    """커버 이미지를 업로드하여 교체합니다."""
    return _replace_image('coverImage', current_app.services['users'].replace_cover_image)


@users_bp.route('/me/cover-image', methods=['DELETE'])
@jwt_required()
def remove_my_cover_image():
    current_app.services['users'].remove_cover_image(get_jwt_identity())
    return Response(status=204)
