# app/api/users/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError

class SocialLinksSchema(Schema):
    facebook = fields.Str(load_default="")
    instagram = fields.Str(load_default="")
    twitter = fields.Str(load_default="")

class UserSummarySchema(Schema):
    """게시물/댓글 작성자, 팔로워 목록 등에 포함되는 사용자 공개 정보."""
    user_id = fields.Str(required=True)
    username = fields.Str(required=True)
    name = fields.Str(allow_none=True)
    profile_image_url = fields.Str(allow_none=True)

class UserCreateSchema(Schema):
    """
    POST /api/users (multipart/form-data)
    회원 가입 요청의 폼 필드를 검사합니다. 프로필 이미지는 'profileImage' 파일 필드로 받습니다.
    """
    username = fields.Str(required=True, validate=validate.Length(min=3, max=30))
    email = fields.Email(required=True)
    name = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=6))
    cpassword = fields.Str(required=True, load_only=True)
    bio = fields.Str(load_default="", validate=validate.Length(max=300))
    facebook = fields.Str(load_default="")
    instagram = fields.Str(load_default="")
    twitter = fields.Str(load_default="")

class UsernameSchema(Schema):
    """POST /api/users/username"""
    username = fields.Str(required=True, validate=validate.Length(min=1))

class UserSearchSchema(Schema):
    """GET /api/users/search?name=... (이름 접두어, 대소문자 무시)"""
    name = fields.Str(required=True, validate=validate.Length(min=1, error="검색어를 1글자 이상 입력해주세요."))

class ProfileUpdateSchema(Schema):
    """PATCH /api/users/me"""
    bio = fields.Str(validate=validate.Length(max=300))
    social_links = fields.Nested(SocialLinksSchema)
    password = fields.Str(load_only=True, validate=validate.Length(min=6))
    cpassword = fields.Str(load_only=True)

    @validates_schema
    def validate_password_pair(self, data, **kwargs):
        if data.get("password") and data.get("password") != data.get("cpassword"):
            raise ValidationError("비밀번호와 비밀번호 확인이 일치하지 않습니다.", "cpassword")

class UserProfileResponseSchema(UserSummarySchema):
    """GET /api/users/{user_id} 프로필 응답. 민감한 정보(email, password_hash)는 제외합니다."""
    bio = fields.Str()
    social_links = fields.Nested(SocialLinksSchema)
    cover_image_url = fields.Str(allow_none=True)
    followers = fields.List(fields.Nested(UserSummarySchema))
    following = fields.List(fields.Nested(UserSummarySchema))
    follower_count = fields.Int()
    following_count = fields.Int()
    created_at = fields.DateTime(allow_none=True)
