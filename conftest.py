# conftest.py
"""
테스트 공용 픽스처.

Firestore / Storage 대신 메모리 기반 가짜 저장소를 주입합니다.
가짜 저장소는 실제 어댑터와 같은 메서드 시그니처와 예외(NotFoundError, ConflictError)를 따르며,
특정 호출을 실패시키거나 호출 순서를 확인할 수 있습니다.
"""

import copy
import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
from flask_jwt_extended import create_access_token

from app import create_app
from app.api.comments.services import CommentService
from app.api.feed.services import FeedService
from app.api.follows.services import FollowService
from app.api.posts.services import PostService
from app.api.users.services import UserService
from app.core.exceptions import (
    ConflictError, ExternalServiceError, InvalidInputError, NotFoundError
)
from app.models.comment import Comment
from app.models.media import MediaKind, MediaRef
from app.models.post import Post
from app.models.user import User
from app.services.like_service import LikeService
from app.services.media_lifecycle import MediaLifecycleCoordinator

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

FILTER_OPS = {
    "==": lambda field, value: field == value,
    "in": lambda field, value: field in value,
    ">=": lambda field, value: field is not None and field >= value,
    "<=": lambda field, value: field is not None and field <= value,
}


class FakeDocumentStore:
    """DocumentStore 와 같은 인터페이스를 가진 메모리 저장소."""
    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self._failures: List[dict] = []

    # --- 테스트 보조 ---
    def put(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self.collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)

    def raw(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        return self.collections.get(collection, {}).get(doc_id)

    def fail(self, method: str, collection: str = None, doc_id: str = None,
             field_path: str = None, error: Exception = None) -> None:
        """조건에 맞는 호출이 error 를 발생시키도록 등록합니다."""
        self._failures.append({
            "method": method, "collection": collection, "doc_id": doc_id,
            "field_path": field_path,
            "error": error or ExternalServiceError("firestore down", transient=True, service="firestore"),
        })

    def _record(self, method, collection, doc_id=None, field_path=None):
        self.calls.append((method, collection, doc_id, field_path))
        for rule in self._failures:
            if rule["method"] != method:
                continue
            if rule["collection"] not in (None, collection):
                continue
            if rule["doc_id"] not in (None, doc_id):
                continue
            if rule["field_path"] not in (None, field_path):
                continue
            raise rule["error"]

    def _docs(self, collection):
        return self.collections.setdefault(collection, {})

    # --- 조회 ---
    def get(self, collection, doc_id):
        self._record("get", collection, doc_id)
        doc = self._docs(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def get_many(self, collection, doc_ids):
        unique_ids = list(dict.fromkeys(doc_ids))
        self._record("get_many", collection)
        docs = self._docs(collection)
        return {doc_id: copy.deepcopy(docs[doc_id]) for doc_id in unique_ids if doc_id in docs}

    def find(self, collection, filters=(), order_by=(), offset=0, limit=None):
        self._record("find", collection)
        results = []
        for doc in self._docs(collection).values():
            matched = True
            for field_path, op, value in filters:
                if not FILTER_OPS[op](doc.get(field_path), value):
                    matched = False
            if matched:
                results.append(copy.deepcopy(doc))
        for field_path, direction in reversed(list(order_by)):
            results.sort(key=lambda d: d.get(field_path), reverse=(direction == self.DESCENDING))
        results = results[offset:]
        if limit is not None:
            results = results[:limit]
        return results

    # --- 변경 ---
    def create(self, collection, doc_id, data):
        self._record("create", collection, doc_id)
        docs = self._docs(collection)
        if doc_id in docs:
            raise ConflictError(f"{collection}/{doc_id}: 이미 존재합니다.")
        docs[doc_id] = copy.deepcopy(data)

    def _existing(self, collection, doc_id):
        doc = self._docs(collection).get(doc_id)
        if doc is None:
            raise NotFoundError(f"{collection}/{doc_id}: 대상을 찾을 수 없습니다.")
        return doc

    def update(self, collection, doc_id, fields):
        self._record("update", collection, doc_id)
        self._existing(collection, doc_id).update(copy.deepcopy(fields))

    def add_to_set(self, collection, doc_id, field_path, value):
        self._record("add_to_set", collection, doc_id, field_path)
        values = self._existing(collection, doc_id).setdefault(field_path, [])
        if value not in values:
            values.append(value)

    def remove_from_set(self, collection, doc_id, field_path, value):
        self._record("remove_from_set", collection, doc_id, field_path)
        doc = self._existing(collection, doc_id)
        doc[field_path] = [v for v in doc.get(field_path) or [] if v != value]

    def swap_field(self, collection, doc_id, field_path, value, extra_fields=None):
        self._record("swap_field", collection, doc_id, field_path)
        doc = self._existing(collection, doc_id)
        previous = copy.deepcopy(doc.get(field_path))
        doc.update(copy.deepcopy(extra_fields or {}))
        doc[field_path] = copy.deepcopy(value)
        return previous

    def delete(self, collection, doc_id):
        self._record("delete", collection, doc_id)
        return self._docs(collection).pop(doc_id, None)


class FakeStorage:
    """StorageService 와 같은 인터페이스를 가진 메모리 파일 저장소."""

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self.uploads: List[str] = []
        self.deletes: List[str] = []
        self.upload_error: Optional[Exception] = None
        self.delete_errors: Dict[str, Exception] = {}
        self._counter = itertools.count(1)

    def upload(self, data, kind, upload_type, owner_id, content_type=None, filename=None):
        if self.upload_error is not None:
            raise self.upload_error
        if not data:
            raise InvalidInputError("업로드할 파일이 비어 있습니다.")
        handle = f"{upload_type}/{owner_id}/{next(self._counter)}"
        self.blobs[handle] = data
        self.uploads.append(handle)
        return MediaRef(url=f"https://storage.test/{handle}", handle=handle, kind=kind)

    def delete(self, handle, kind=MediaKind.IMAGE):
        self.deletes.append(handle)
        if handle in self.delete_errors:
            raise self.delete_errors[handle]
        self.blobs.pop(handle, None)


# --- 저장소 / 서비스 픽스처 ---

@pytest.fixture
def store():
    return FakeDocumentStore()

@pytest.fixture
def storage():
    return FakeStorage()

@pytest.fixture
def media(storage):
    return MediaLifecycleCoordinator(storage)

@pytest.fixture
def like_service(store):
    return LikeService(store)

@pytest.fixture
def user_service(store, media):
    return UserService(store, media)

@pytest.fixture
def follow_service(store):
    return FollowService(store)

@pytest.fixture
def comment_service(store, media, like_service, user_service):
    return CommentService(store, media, like_service, user_service)

@pytest.fixture
def post_service(store, media, like_service, comment_service):
    return PostService(store, media, like_service, comment_service)

@pytest.fixture
def feed_service(store, user_service):
    return FeedService(store, user_service)


# --- 데이터 생성 도우미 ---

@pytest.fixture
def make_user(store):
    """사용자 문서를 저장소에 직접 넣습니다."""
    def _make(user_id: str, **fields) -> User:
        user = User(
            user_id=user_id,
            username=fields.pop("username", user_id),
            email=fields.pop("email", f"{user_id}@example.com"),
            name=fields.pop("name", user_id.upper()),
            password_hash="hashed",
            created_at=BASE_TIME,
            **fields,
        )
        store.put(User.COLLECTION, user_id, user.to_dict())
        return user
    return _make

@pytest.fixture
def make_post(store):
    """게시물 문서를 저장소에 직접 넣습니다. minutes 는 BASE_TIME 기준 작성 시각입니다."""
    def _make(post_id: str, author_id: str, minutes: int = 0, **fields) -> Post:
        post = Post(
            post_id=post_id,
            author_id=author_id,
            text=fields.pop("text", f"post {post_id}"),
            created_at=BASE_TIME + timedelta(minutes=minutes),
            **fields,
        )
        store.put(Post.COLLECTION, post_id, post.to_dict())
        return post
    return _make

@pytest.fixture
def make_comment(store):
    """댓글 문서를 넣고 게시물의 comment_ids 에 연결합니다."""
    def _make(comment_id: str, post_id: str, author_id: str, **fields) -> Comment:
        comment = Comment(
            comment_id=comment_id,
            post_id=post_id,
            author_id=author_id,
            text=fields.pop("text", f"comment {comment_id}"),
            created_at=BASE_TIME,
            **fields,
        )
        store.put(Comment.COLLECTION, comment_id, comment.to_dict())
        post = store.raw(Post.COLLECTION, post_id)
        if post is not None:
            post.setdefault("comment_ids", []).append(comment_id)
        return comment
    return _make


# --- Flask 앱 픽스처 ---

@pytest.fixture
def app(store, storage):
    app = create_app('testing', document_store=store, storage_service=storage)
    yield app

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def auth_headers(app):
    """user_id 로 서명된 Bearer 토큰 헤더를 만듭니다."""
    def _headers(user_id: str) -> Dict[str, str]:
        with app.app_context():
            token = create_access_token(identity=user_id)
        return {"Authorization": f"Bearer {token}"}
    return _headers
