# app/services/storage_service.py
import uuid
import logging
from typing import Optional

from flask import Flask
from firebase_admin import storage
from google.api_core import exceptions as google_exceptions

from app.core.exceptions import InvalidInputError
from app.models.media import MediaKind, MediaRef
from app.services.reconciliation import report_orphan_asset
from app.utils.external_calls import external_call

class StorageService:
    """
    Firebase Storage 관련 로직을 담당하는 범용 서비스 클래스입니다.
    바이트 업로드 후 (공개 URL, 삭제 핸들) 참조를 돌려주고, 핸들로 파일을 삭제합니다.
    삭제 핸들은 버킷 안의 blob 경로입니다.
    """

    # 'upload_type'에 따라 파일이 저장될 폴더 경로
    PATH_MAP = {
        "profile_image": "profile_images/{owner_id}",
        "cover_image": "cover_images/{owner_id}",
        "post_media": "post_media/{owner_id}",
        "comment_image": "comment_images/{owner_id}",
    }

    DEFAULT_CONTENT_TYPES = {
        MediaKind.IMAGE: "image/jpeg",
        MediaKind.VIDEO: "video/mp4",
    }

    def __init__(self):
        """
        클래스 인스턴스 생성 시 버킷을 None으로 초기화합니다.
        실제 버킷 객체는 init_app 메서드를 통해 주입됩니다.
        """
        self.bucket = None
        self.timeout: Optional[float] = None

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Storage 버킷을 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        self.timeout = app.config.get('EXTERNAL_CALL_TIMEOUT')
        logging.info("StorageService: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def _build_blob_name(self, upload_type: str, owner_id: str, filename: Optional[str]) -> str:
        folder_template = self.PATH_MAP.get(upload_type)
        if not folder_template:
            raise InvalidInputError(f"'{upload_type}'은(는) 유효한 업로드 타입이 아닙니다.")

        extension = filename.rsplit('.', 1)[-1].lower() if filename and '.' in filename else ''
        unique_filename = f"{uuid.uuid4()}.{extension}" if extension else str(uuid.uuid4())
        return f"{folder_template.format(owner_id=owner_id)}/{unique_filename}"

    def upload(self, data: bytes, kind: MediaKind, upload_type: str, owner_id: str,
               content_type: Optional[str] = None, filename: Optional[str] = None) -> MediaRef:
        """
        바이트를 업로드하고 공개 URL과 삭제 핸들을 반환합니다.

        :param data: 업로드할 파일 내용
        :param kind: 이미지 / 동영상 구분
        :param upload_type: 업로드 목적 (PATH_MAP 키)
        :param owner_id: 파일을 소유하는 사용자 ID (폴더 구분용)
        :return: MediaRef(url, handle, kind)
        """
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")
        if not data:
            raise InvalidInputError("업로드할 파일이 비어 있습니다.")

        blob_name = self._build_blob_name(upload_type, owner_id, filename)
        blob = self.bucket.blob(blob_name)

        with external_call('storage', f"{blob_name} upload"):
            blob.upload_from_string(
                data,
                content_type=content_type or self.DEFAULT_CONTENT_TYPES[kind],
                timeout=self.timeout,
            )
        try:
            with external_call('storage', f"{blob_name} make_public"):
                blob.make_public(timeout=self.timeout)
        except Exception as e:
            self._discard_unpublished(blob, blob_name, kind, e)
            raise

        logging.info(f"Storage 업로드 완료: {blob_name}")
        return MediaRef(url=blob.public_url, handle=blob_name, kind=kind)

    def _discard_unpublished(self, blob, blob_name: str, kind: MediaKind, error: Exception) -> None:
        """업로드는 됐지만 공개 설정에 실패한 파일을 지웁니다. 지우지 못하면 고아로 기록합니다."""
        try:
            blob.delete(timeout=self.timeout)
            logging.warning(f"공개 설정 실패로 업로드한 파일을 삭제했습니다: {blob_name} ({error})")
        except Exception as delete_error:
            logging.error(f"공개 설정 실패 후 파일 삭제 실패 (handle: {blob_name}): {delete_error}")
            report_orphan_asset(MediaRef(url=blob.public_url, handle=blob_name, kind=kind), "공개 설정 실패", error)

    def delete(self, handle: str, kind: MediaKind = MediaKind.IMAGE) -> None:
        """
        삭제 핸들(blob 경로)에 해당하는 파일을 삭제합니다.
        이미 존재하지 않는 파일은 삭제된 것으로 간주합니다.
        """
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")
        if not handle:
            return

        blob = self.bucket.blob(handle)
        with external_call('storage', f"{handle} delete ({kind.value})"):
            try:
                blob.delete(timeout=self.timeout)
            except google_exceptions.NotFound:
                logging.warning(f"Storage에서 이미 삭제된 파일입니다: {handle}")
                return
        logging.info(f"Storage 파일 삭제 완료: {handle}")
