# app/services/document_store.py
"""
Firestore를 문서 저장소로 사용하는 어댑터.

도메인 서비스들은 이 클래스가 제공하는 단일 문서 단위의 원자적 연산만 사용합니다.
(조회, 생성, 필드 설정, 배열 집합 추가/제거, 단일 문서 트랜잭션 교체/삭제, 조건 조회)
여러 문서에 걸친 트랜잭션은 제공하지 않으며, 여러 문서를 바꾸는 작업은 서비스 계층에서
정해진 순서대로 단계별로 커밋합니다.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from flask import Flask
from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from app.core.exceptions import NotFoundError
from app.utils.datetime_utils import DateTimeUtils
from app.utils.external_calls import external_call

Filter = Tuple[str, str, Any]
Ordering = Tuple[str, str]

# Firestore 'in' 연산자에 전달할 수 있는 최대 값 개수
IN_QUERY_LIMIT = 30


class DocumentStore:
    ASCENDING = firestore.Query.ASCENDING
    DESCENDING = firestore.Query.DESCENDING

    def __init__(self):
        """실제 Firestore 클라이언트는 init_app 에서 연결합니다."""
        self.db = None
        self.timeout: Optional[float] = None

    def init_app(self, app: Flask):
        self.db = firestore.client()
        self.timeout = app.config.get('EXTERNAL_CALL_TIMEOUT')
        logging.info("DocumentStore: Firestore 클라이언트가 초기화되었습니다.")

    def _ref(self, collection: str, doc_id: str):
        if not self.db:
            raise RuntimeError("DocumentStore가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")
        return self.db.collection(collection).document(doc_id)

    # --- 조회 ---
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with external_call('firestore', f"{collection}/{doc_id} get"):
            snapshot = self._ref(collection, doc_id).get(timeout=self.timeout)
        if not snapshot.exists:
            return None
        return DateTimeUtils.from_firestore(snapshot.to_dict())

    def get_many(self, collection: str, doc_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """여러 문서를 한 번에 조회합니다. 존재하지 않는 문서는 결과에서 빠집니다."""
        unique_ids = list(dict.fromkeys(doc_ids))
        if not unique_ids:
            return {}
        refs = [self._ref(collection, doc_id) for doc_id in unique_ids]
        with external_call('firestore', f"{collection} get_all ({len(refs)})"):
            snapshots = list(self.db.get_all(refs, timeout=self.timeout))
        return {
            snapshot.id: DateTimeUtils.from_firestore(snapshot.to_dict())
            for snapshot in snapshots if snapshot.exists
        }

    def find(self, collection: str,
             filters: Sequence[Filter] = (),
             order_by: Sequence[Ordering] = (),
             offset: int = 0,
             limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """조건, 정렬, skip/limit 으로 문서 목록을 조회합니다."""
        if not self.db:
            raise RuntimeError("DocumentStore가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")
        query = self.db.collection(collection)
        for field_path, op, value in filters:
            query = query.where(filter=FieldFilter(field_path, op, value))
        for field_path, direction in order_by:
            query = query.order_by(field_path, direction=direction)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        with external_call('firestore', f"{collection} query"):
            docs = list(query.stream(timeout=self.timeout))
        return [DateTimeUtils.from_firestore(doc.to_dict()) for doc in docs]

    # --- 단일 문서 변경 ---
    def create(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """문서를 새로 만듭니다. 같은 ID의 문서가 이미 있으면 ConflictError."""
        with external_call('firestore', f"{collection}/{doc_id} create"):
            self._ref(collection, doc_id).create(DateTimeUtils.for_firestore(data), timeout=self.timeout)

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """필드를 설정합니다. 문서가 없으면 NotFoundError."""
        with external_call('firestore', f"{collection}/{doc_id} update"):
            self._ref(collection, doc_id).update(DateTimeUtils.for_firestore(fields), timeout=self.timeout)

    def add_to_set(self, collection: str, doc_id: str, field_path: str, value: Any) -> None:
        """배열 필드에 값을 추가합니다. 이미 있으면 아무 변화가 없습니다 (ArrayUnion)."""
        with external_call('firestore', f"{collection}/{doc_id} {field_path} union"):
            self._ref(collection, doc_id).update(
                {field_path: firestore.ArrayUnion([value])}, timeout=self.timeout
            )

    def remove_from_set(self, collection: str, doc_id: str, field_path: str, value: Any) -> None:
        """배열 필드에서 값을 제거합니다. 없으면 아무 변화가 없습니다 (ArrayRemove)."""
        with external_call('firestore', f"{collection}/{doc_id} {field_path} remove"):
            self._ref(collection, doc_id).update(
                {field_path: firestore.ArrayRemove([value])}, timeout=self.timeout
            )

    def swap_field(self, collection: str, doc_id: str, field_path: str, value: Any,
                   extra_fields: Optional[Dict[str, Any]] = None) -> Any:
        """
        [트랜잭션] 필드를 새 값으로 바꾸고 이전 값을 반환합니다.
        미디어 참조 교체처럼 '이전 값 확인 + 새 값 기록'이 원자적이어야 할 때 사용합니다.
        """
        ref = self._ref(collection, doc_id)
        transaction = self.db.transaction()
        update_data = dict(extra_fields or {})
        update_data[field_path] = value
        update_data = DateTimeUtils.for_firestore(update_data)

        @firestore.transactional
        def _swap_in_transaction(transaction):
            snapshot = ref.get(transaction=transaction, timeout=self.timeout)
            if not snapshot.exists:
                raise NotFoundError(f"{collection}/{doc_id} 문서를 찾을 수 없습니다.")
            previous = (snapshot.to_dict() or {}).get(field_path)
            transaction.update(ref, update_data)
            return previous

        with external_call('firestore', f"{collection}/{doc_id} swap {field_path}"):
            return _swap_in_transaction(transaction)

    def delete(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """
        [트랜잭션] 문서를 삭제하고 삭제 직전의 내용을 반환합니다.
        문서가 없으면 None을 반환합니다.
        """
        ref = self._ref(collection, doc_id)
        transaction = self.db.transaction()

        @firestore.transactional
        def _delete_in_transaction(transaction):
            snapshot = ref.get(transaction=transaction, timeout=self.timeout)
            if not snapshot.exists:
                return None
            data = snapshot.to_dict()
            transaction.delete(ref)
            return data

        with external_call('firestore', f"{collection}/{doc_id} delete"):
            deleted = _delete_in_transaction(transaction)
        return DateTimeUtils.from_firestore(deleted) if deleted is not None else None
