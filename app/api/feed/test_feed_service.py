# app/api/feed/test_feed_service.py
"""
피드 조회 테스트

사용법: python -m pytest app/api/feed/test_feed_service.py -v
"""

import pytest

from app.api.feed.services import PAGE_SIZE
from app.core.exceptions import InvalidInputError, NotFoundError
from app.models.user import User

def test_profile_feed_pages_do_not_overlap(feed_service, make_user, make_post):
    make_user("u1")
    for i in range(25):
        make_post(f"p{i:02d}", "u1", minutes=i)

    page1 = [p["post_id"] for p in feed_service.get_profile_feed("u1", 1)]
    page2 = [p["post_id"] for p in feed_service.get_profile_feed("u1", 2)]
    page3 = [p["post_id"] for p in feed_service.get_profile_feed("u1", 3)]

    assert page1 == [f"p{i:02d}" for i in range(24, 14, -1)]
    assert page2 == [f"p{i:02d}" for i in range(14, 4, -1)]
    assert len(page3) == 5
    assert feed_service.get_profile_feed("u1", 4) == []

def test_same_timestamp_is_ordered_by_post_id(feed_service, make_user, make_post):
    make_user("u1")
    make_post("a", "u1", minutes=0)
    make_post("c", "u1", minutes=0)
    make_post("b", "u1", minutes=0)
    assert [p["post_id"] for p in feed_service.get_profile_feed("u1", 1)] == ["c", "b", "a"]

@pytest.mark.parametrize("page", [0, -1, "1", True])
def test_invalid_page(feed_service, page):
    with pytest.raises(InvalidInputError):
        feed_service.get_profile_feed("u1", page)

def test_home_feed_includes_following_and_self(feed_service, make_user, make_post):
    make_user("u1", following=["u2"])
    make_user("u2", followers=["u1"])
    make_user("u3")
    make_post("mine", "u1", minutes=1)
    make_post("theirs", "u2", minutes=2)
    make_post("stranger", "u3", minutes=3)

    feed = feed_service.get_home_feed("u1", 1)

    assert [p["post_id"] for p in feed] == ["theirs", "mine"]
    assert feed[0]["author"]["username"] == "u2"

def test_home_feed_for_missing_viewer(feed_service):
    with pytest.raises(NotFoundError):
        feed_service.get_home_feed("ghost", 1)

def test_home_feed_merges_large_audience(store, feed_service, make_user, make_post):
    followees = [f"f{i:02d}" for i in range(45)]
    make_user("viewer", following=followees)
    for i, followee in enumerate(followees):
        make_user(followee)
        make_post(f"post-{followee}", followee, minutes=i)

    page1 = [p["post_id"] for p in feed_service.get_home_feed("viewer", 1)]
    page2 = [p["post_id"] for p in feed_service.get_home_feed("viewer", 2)]

    assert page1 == [f"post-f{i:02d}" for i in range(44, 34, -1)]
    assert page2 == [f"post-f{i:02d}" for i in range(34, 24, -1)]
    assert len([c for c in store.calls if c[0] == "find"]) == 4

def test_missing_author_is_null(store, feed_service, make_user, make_post, make_comment):
    make_user("u1")
    make_post("p1", "u1")
    make_comment("c1", "p1", "deleted-user")
    make_comment("c2", "p1", "u1")
    store.collections[User.COLLECTION].pop("u1")

    post = feed_service.get_post("p1")

    assert post["author"] is None
    assert [c["author"] for c in post["comments"]] == [None, None]

def test_hydrated_post_shape(feed_service, make_user, make_post, make_comment):
    make_user("u1")
    make_user("u2")
    make_post("p1", "u1", likes=["u2"])
    make_comment("c1", "p1", "u2", likes=["u1"])
    make_comment("c2", "p1", "u1")

    post = feed_service.get_post("p1", viewer_id="u2")

    assert post["likes"] == ["u2"]
    assert post["like_count"] == 1
    assert post["liked_by_viewer"] is True
    assert post["media_url"] is None
    assert [c["comment_id"] for c in post["comments"]] == ["c1", "c2"]
    assert post["comments"][0]["author"]["user_id"] == "u2"
    assert post["comments"][0]["liked_by_viewer"] is False
    assert post["comment_count"] == 2

def test_page_size():
    assert PAGE_SIZE == 10
