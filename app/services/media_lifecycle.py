# app/services/media_lifecycle.py
"""
Storage 파일과 그 파일을 참조하는 문서를 함께 관리하는 코디네이터.

Firestore와 Storage는 하나의 트랜잭션으로 묶을 수 없으므로, 모든 작업을 정해진 순서의
독립 커밋 단계로 수행합니다. 실패한 단계를 되돌리는 롤백(saga)은 하지 않고, 뒤따르는 단계의
실패는 reconciliation 로그로 남깁니다.

- 교체: 새 파일 업로드 -> 문서의 참조 교체 -> 이전 파일 삭제
  (업로드 실패 시 문서는 그대로, 교체 실패 시 새 파일은 고아로 기록)
- 삭제: 문서 삭제 -> 파일 삭제 (파일 삭제 실패 시 고아로 기록)

문서가 삭제된 파일을 가리키는 순간이 생기지 않도록, 이전 파일 삭제는 항상 참조 교체 이후에 합니다.
"""

import logging
from typing import Callable, Iterable, Optional, TypeVar

from app.models.media import MediaRef, MediaUpload, EMPTY_MEDIA
from app.services.reconciliation import report_orphan_asset
from app.services.storage_service import StorageService

T = TypeVar('T')

class MediaLifecycleCoordinator:
    def __init__(self, storage_service: StorageService):
        self.storage_service = storage_service

    def upload(self, upload: MediaUpload, upload_type: str, owner_id: str) -> MediaRef:
        """새 파일을 업로드합니다. 실패하면 예외가 그대로 전달되며 어떤 문서도 변경되지 않습니다."""
        return self.storage_service.upload(
            upload.data, upload.kind, upload_type, owner_id,
            content_type=upload.content_type, filename=upload.filename
        )

    def create_with_asset(self, upload: Optional[MediaUpload], upload_type: str, owner_id: str,
                          create: Callable[[MediaRef], T]) -> T:
        """
        (선택적) 업로드 후 그 참조를 담은 문서를 생성합니다.
        문서 생성이 실패하면 방금 올린 파일은 고아로 기록되고 예외는 다시 발생합니다.
        """
        ref = self.upload(upload, upload_type, owner_id) if upload else EMPTY_MEDIA
        try:
            return create(ref)
        except Exception as e:
            if not ref.is_empty:
                report_orphan_asset(ref, f"{upload_type} 문서 생성 실패", e)
            raise

    def replace_asset(self, owner_update: Callable[[MediaRef], MediaRef], upload: MediaUpload,
                      upload_type: str, owner_id: str) -> MediaRef:
        """
        업로드 -> 참조 교체 -> 이전 파일 삭제 순서로 파일을 교체하고 새 참조를 반환합니다.

        :param owner_update: 새 참조를 문서에 원자적으로 기록하고 이전 참조를 반환하는 함수
        """
        new_ref = self.upload(upload, upload_type, owner_id)
        try:
            old_ref = owner_update(new_ref)
        except Exception as e:
            report_orphan_asset(new_ref, f"{upload_type} 참조 교체 실패", e)
            raise

        self.discard(old_ref, f"{upload_type} 교체로 인한 이전 파일 삭제")
        return new_ref

    def remove_asset(self, owner_update: Callable[[MediaRef], MediaRef], upload_type: str) -> MediaRef:
        """문서의 참조를 비운 뒤 이전 파일을 삭제합니다. 이전 참조를 반환합니다."""
        old_ref = owner_update(EMPTY_MEDIA)
        self.discard(old_ref, f"{upload_type} 제거")
        return old_ref

    def delete_owner(self, owner_delete: Callable[[], Optional[MediaRef]]) -> Optional[MediaRef]:
        """
        문서를 먼저 삭제하고, 문서가 참조하던 파일을 삭제합니다.
        owner_delete 가 None을 반환하면 삭제할 문서가 없었던 것으로 봅니다.
        """
        ref = owner_delete()
        if ref is not None:
            self.discard(ref, "소유 문서 삭제")
        return ref

    def discard(self, ref: Optional[MediaRef], reason: str) -> bool:
        """
        파일을 최선을 다해(best-effort) 삭제합니다. 재시도하지 않으며 실패는 고아로 기록합니다.
        :return: 삭제에 성공했거나 삭제할 파일이 없으면 True
        """
        if ref is None or ref.is_empty:
            return True
        try:
            self.storage_service.delete(ref.handle, ref.kind)
            return True
        except Exception as e:
            logging.error(f"Storage 파일 삭제 실패 (handle: {ref.handle}): {e}")
            report_orphan_asset(ref, reason, e)
            return False

    def discard_many(self, refs: Iterable[MediaRef], reason: str) -> int:
        """여러 파일을 각각 독립적으로 삭제합니다. 하나의 실패가 나머지를 막지 않습니다. 실패 개수를 반환합니다."""
        return sum(0 if self.discard(ref, reason) else 1 for ref in refs)
