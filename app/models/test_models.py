# app/models/test_models.py
"""
문서 모델 변환 테스트

사용법: python -m pytest app/models/test_models.py -v
"""

import pytest

from app.models.comment import Comment
from app.models.likeable import Likeable
from app.models.media import MediaKind, MediaRef, EMPTY_MEDIA
from app.models.post import Post
from app.models.user import User

def test_media_ref_requires_url_and_handle_together():
    with pytest.raises(ValueError):
        MediaRef(url="https://storage.test/a.jpg")
    with pytest.raises(ValueError):
        MediaRef(handle="post_media/u1/a.jpg")

def test_media_ref_from_empty_map_is_empty():
    assert MediaRef.from_dict(None) is EMPTY_MEDIA
    assert MediaRef.from_dict({}).is_empty
    assert MediaRef.from_dict({"url": "", "handle": "", "kind": "image"}).is_empty

def test_media_ref_keeps_kind():
    ref = MediaRef.from_dict({"url": "https://x/v.mp4", "handle": "post_media/u1/v.mp4", "kind": "video"})
    assert ref.kind == MediaKind.VIDEO
    assert not ref.is_empty
    assert ref.to_dict()["kind"] == "video"

def test_post_from_dict_fills_defaults():
    post = Post.from_dict({"post_id": "p1", "author_id": "u1", "created_at": None})
    assert post.text == ""
    assert post.media.is_empty
    assert post.likes == []
    assert post.comment_ids == []
    assert post.entity_id == "p1"

def test_liked_by():
    comment = Comment(comment_id="c1", post_id="p1", author_id="u1", likes=["u2"])
    assert comment.is_liked_by("u2")
    assert not comment.is_liked_by("u1")
    assert comment.entity_id == "c1"

def test_user_summary_hides_private_fields():
    user = User(user_id="u1", username="alice", email="a@example.com", name="Alice", password_hash="hash")
    summary = user.summary()
    assert summary == {"user_id": "u1", "username": "alice", "name": "Alice", "profile_image_url": None}
    assert User.from_dict(user.to_dict()).social_links.twitter == ""

def test_likeable_requires_entity_id():
    class Broken(Likeable):
        COLLECTION = 'broken'

    with pytest.raises(TypeError):
        Broken()
    assert isinstance(Post(post_id="p1", author_id="u1"), Likeable)
