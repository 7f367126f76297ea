# app/api/test_routes.py
"""
HTTP API 테스트 (Flask test client + 가짜 저장소)

사용법: python -m pytest app/api/test_routes.py -v
"""

import io

from app.models.post import Post
from app.models.user import User

def test_requires_token(client):
    assert client.get('/api/feed').status_code == 401

def test_register_and_check_username(client, store):
    response = client.post('/api/users', data={
        "username": "alice", "email": "alice@example.com", "name": "Alice",
        "password": "secret1", "cpassword": "secret1",
        "profileImage": (io.BytesIO(b"img"), "me.png", "image/png"),
    }, content_type='multipart/form-data')

    assert response.status_code == 201
    body = response.get_json()
    assert body["username"] == "alice"
    assert body["profile_image_url"].startswith("https://storage.test/profile_image/")
    assert "password" not in body

    taken = client.post('/api/users/username', json={"username": "Alice"})
    assert taken.status_code == 409
    assert client.post('/api/users/username', json={"username": "bob"}).status_code == 200

def test_register_validation_error(client):
    response = client.post('/api/users', data={"username": "al"}, content_type='multipart/form-data')
    assert response.status_code == 400
    assert response.get_json()["error_code"] == "VALIDATION_ERROR"

def test_follow_like_and_feed_flow(client, store, make_user, auth_headers):
    make_user("u1")
    make_user("u2")

    assert client.put('/api/users/u2/follow', headers=auth_headers("u1")).status_code == 200

    created = client.post('/api/posts', data={"text": "hello"},
                          headers=auth_headers("u2"), content_type='multipart/form-data')
    assert created.status_code == 201
    post_id = created.get_json()["post_id"]

    feed = client.get('/api/feed', headers=auth_headers("u1")).get_json()
    assert [p["post_id"] for p in feed["posts"]] == [post_id]
    assert feed["posts"][0]["likes"] == []

    for _ in range(2):
        liked = client.put(f'/api/posts/{post_id}/like', json={"liked": True}, headers=auth_headers("u1"))
        assert liked.get_json() == {"post_id": post_id, "liked": True}

    post = client.get(f'/api/posts/{post_id}', headers=auth_headers("u1")).get_json()
    assert post["likes"] == ["u1"]
    assert post["liked_by_viewer"] is True
    assert store.raw(Post.COLLECTION, post_id)["likes"] == ["u1"]

def test_self_follow_is_bad_request(client, make_user, auth_headers):
    make_user("u1")
    response = client.put('/api/users/u1/follow', headers=auth_headers("u1"))
    assert response.status_code == 400
    assert response.get_json()["error_code"] == "INVALID_INPUT"

def test_followers_listing(client, make_user, auth_headers):
    make_user("u1", following=["u2"])
    make_user("u2", followers=["u1"])
    body = client.get('/api/users/u2/followers', headers=auth_headers("u1")).get_json()
    assert [u["user_id"] for u in body["users"]] == ["u1"]

def test_profile_hides_email(client, make_user, auth_headers):
    make_user("u1")
    body = client.get('/api/users/u1', headers=auth_headers("u1")).get_json()
    assert body["username"] == "u1"
    assert "email" not in body
    assert "password_hash" not in body

def test_replace_profile_image(client, store, storage, make_user, auth_headers):
    make_user("u1")
    response = client.put('/api/users/me/profile-image',
                          data={"profileImage": (io.BytesIO(b"new"), "new.jpg", "image/jpeg")},
                          headers=auth_headers("u1"), content_type='multipart/form-data')
    assert response.status_code == 200
    assert store.raw(User.COLLECTION, "u1")["profile_image"]["url"] == response.get_json()["url"]

def test_comment_routes(client, store, make_user, make_post, auth_headers):
    make_user("u1")
    make_user("u2")
    make_post("p1", "u1")

    created = client.post('/api/posts/p1/comments', data={"text": "nice"},
                          headers=auth_headers("u2"), content_type='multipart/form-data')
    assert created.status_code == 201
    comment_id = created.get_json()["comment_id"]
    assert created.get_json()["author"]["user_id"] == "u2"

    edited = client.patch(f'/api/posts/p1/comments/{comment_id}', data={"text": "very nice"},
                          headers=auth_headers("u2"), content_type='multipart/form-data')
    assert edited.get_json()["text"] == "very nice"

    forbidden = client.patch(f'/api/posts/p1/comments/{comment_id}', data={"text": "x"},
                             headers=auth_headers("u1"), content_type='multipart/form-data')
    assert forbidden.status_code == 403

    liked = client.put(f'/api/posts/p1/comments/{comment_id}/like', json={"liked": True},
                       headers=auth_headers("u1"))
    assert liked.get_json()["liked"] is True

    assert client.delete(f'/api/posts/p1/comments/{comment_id}', headers=auth_headers("u1")).status_code == 204
    assert store.raw(Post.COLLECTION, "p1")["comment_ids"] == []

def test_delete_post_route(client, store, make_user, make_post, auth_headers):
    make_user("u1")
    make_post("p1", "u1")
    assert client.delete('/api/posts/p1', headers=auth_headers("u2")).status_code == 403
    assert client.delete('/api/posts/p1', headers=auth_headers("u1")).status_code == 204
    assert client.get('/api/posts/p1', headers=auth_headers("u1")).status_code == 404

def test_feed_page_validation(client, make_user, auth_headers):
    make_user("u1")
    response = client.get('/api/feed?page=0', headers=auth_headers("u1"))
    assert response.status_code == 400

def test_transient_failure_is_503(client, store, make_user, auth_headers):
    make_user("u1")
    store.fail("find", collection=Post.COLLECTION)
    response = client.get('/api/feed/users/u1', headers=auth_headers("u1"))
    assert response.status_code == 503
    assert response.get_json()["retryable"] is True

def test_get_single_comment(client, make_user, make_post, make_comment, auth_headers):
    make_user("u1")
    make_user("u2")
    make_post("p1", "u1")
    make_comment("c1", "p1", "u2", likes=["u1"])

    body = client.get('/api/posts/p1/comments/c1', headers=auth_headers("u1")).get_json()

    assert body["comment_id"] == "c1"
    assert body["author"]["user_id"] == "u2"
    assert body["likes"] == ["u1"]
    assert body["liked_by_viewer"] is True
    assert client.get('/api/posts/p2/comments/c1', headers=auth_headers("u1")).status_code == 404

def test_search_users_route(client, make_user, auth_headers):
    make_user("u1", name="Alice")
    make_user("u2", name="Bob")

    body = client.get('/api/users/search?name=ali', headers=auth_headers("u2")).get_json()
    assert [u["user_id"] for u in body["users"]] == ["u1"]
    assert client.get('/api/users/search', headers=auth_headers("u2")).status_code == 400
