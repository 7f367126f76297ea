# app/api/posts/schemas.py
from marshmallow import Schema, fields, validate

from app.api.comments.schemas import CommentResponseSchema
from app.api.users.schemas import UserSummarySchema

# --- API 요청 스키마 ---

class PostCreateSchema(Schema):
    """
    POST /api/posts (multipart/form-data)
    미디어는 'media' 파일 필드로 받으며, 텍스트와 미디어 중 하나는 있어야 합니다.
    """
    text = fields.Str(load_default=None, validate=validate.Length(max=2000))
    location = fields.Str(load_default=None, validate=validate.Length(max=200))
    media_type = fields.Str(load_default=None, validate=validate.OneOf(["image", "video"]))

class PostUpdateSchema(PostCreateSchema):
    """PATCH /api/posts/{post_id} 요청의 폼 필드를 검사합니다."""

class LikeToggleSchema(Schema):
    """PUT .../like 요청 본문. liked=true 이면 좋아요, false 이면 취소."""
    liked = fields.Bool(required=True)

# --- API 응답 스키마 ---

class PostResponseSchema(Schema):
    """게시글(피드 항목) 응답을 위한 최종 JSON 형식을 정의합니다."""
    post_id = fields.Str(dump_only=True)
    author = fields.Nested(UserSummarySchema, allow_none=True)
    text = fields.Str()
    media_url = fields.Str(allow_none=True)
    media_type = fields.Str(allow_none=True)
    location = fields.Str()
    likes = fields.List(fields.Str())
    like_count = fields.Int()
    liked_by_viewer = fields.Bool(dump_default=False)
    comments = fields.List(fields.Nested(CommentResponseSchema))
    comment_count = fields.Int()
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
