# app/api/feed/schemas.py
from marshmallow import Schema, fields, validate

class FeedQuerySchema(Schema):
    """GET /api/feed?page=N 쿼리 파라미터. page는 1부터 시작하는 양의 정수입니다."""
    page = fields.Int(load_default=1, validate=validate.Range(min=1, error="page는 1 이상이어야 합니다."))
