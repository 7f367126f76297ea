# app/api/comments/schemas.py
from marshmallow import Schema, fields, validate
from app.api.users.schemas import UserSummarySchema # 작성자 정보는 사용자 요약 스키마를 재사용

class CommentCreateSchema(Schema):
    """
    POST /api/posts/{post_id}/comments (multipart/form-data)
    이미지는 'commentImage' 파일 필드로 받으며, 텍스트와 이미지 중 하나는 있어야 합니다.
    """
    text = fields.Str(load_default=None, validate=validate.Length(max=1000, error="댓글은 1000자 이하여야 합니다."))

class CommentUpdateSchema(CommentCreateSchema):
    """PATCH /api/posts/{post_id}/comments/{comment_id}"""

class CommentResponseSchema(Schema):
    """
    댓글 정보 응답을 위한 최종 JSON 형식을 정의합니다.
    """
    comment_id = fields.Str(required=True)
    post_id = fields.Str(required=True)
    author = fields.Nested(UserSummarySchema, allow_none=True)
    text = fields.Str()
    image_url = fields.Str(allow_none=True)
    likes = fields.List(fields.Str())
    like_count = fields.Int()
    liked_by_viewer = fields.Bool(dump_default=False)
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
