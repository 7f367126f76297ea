# app/services/test_like_service.py
"""
좋아요 집합 토글 테스트

사용법: python -m pytest app/services/test_like_service.py -v
"""

from app.models.post import Post

def test_like_is_idempotent(store, like_service, make_post):
    post = make_post("p1", "u2")

    assert like_service.toggle_like(post, "u1", True) is True
    assert like_service.toggle_like(post, "u1", True) is True
    assert store.raw(Post.COLLECTION, "p1")["likes"] == ["u1"]

def test_unlike_is_idempotent(store, like_service, make_post):
    post = make_post("p1", "u2", likes=["u1", "u3"])

    assert like_service.toggle_like(post, "u1", False) is False
    assert like_service.toggle_like(post, "u1", False) is False
    assert store.raw(Post.COLLECTION, "p1")["likes"] == ["u3"]

def test_likes_from_different_users_accumulate(store, like_service, make_post):
    post = make_post("p1", "u2")
    like_service.toggle_like(post, "u1", True)
    like_service.toggle_like(post, "u3", True)
    like_service.toggle_like(post, "u1", False)
    assert store.raw(Post.COLLECTION, "p1")["likes"] == ["u3"]
