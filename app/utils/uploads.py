# app/utils/uploads.py
from typing import Optional

from flask import request

from app.models.media import MediaKind, MediaUpload


def media_upload_from_request(field_name: str, kind: Optional[str] = None) -> Optional[MediaUpload]:
    """
    multipart 요청의 파일 필드를 MediaUpload 로 변환합니다. 파일이 없으면 None.

    :param field_name: request.files 의 키 (예: 'media', 'image')
    :param kind: 'image' / 'video'. 없으면 파일의 MIME 타입으로 판단합니다.
    """
    file = request.files.get(field_name)
    if file is None or not file.filename:
        return None

    mimetype = file.mimetype or ""
    if kind:
        media_kind = MediaKind(kind)
    else:
        media_kind = MediaKind.VIDEO if mimetype.startswith("video/") else MediaKind.IMAGE

    return MediaUpload(
        data=file.read(),
        kind=media_kind,
        content_type=mimetype or None,
        filename=file.filename,
    )
