# app/core/exceptions.py
"""
서비스 계층에서 발생하는 도메인 예외 정의.

라우트 계층은 이 예외들을 직접 잡지 않고, app/__init__.py의 전역 에러 핸들러가
error_code / status_code 를 이용해 일관된 JSON 응답으로 변환합니다.
"""


class SocialServiceError(Exception):
    """모든 도메인 예외의 기반 클래스."""
    error_code = "SERVICE_ERROR"
    status_code = 500

    def __init__(self, message: str = None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__

    def to_dict(self) -> dict:
        return {"error_code": self.error_code, "message": self.message}


class NotFoundError(SocialServiceError):
    """요청한 사용자, 게시물 또는 댓글을 찾을 수 없습니다."""
    error_code = "RESOURCE_NOT_FOUND"
    status_code = 404


class InvalidInputError(SocialServiceError):
    """요청 값이 올바르지 않습니다."""
    error_code = "INVALID_INPUT"
    status_code = 400


class NoUpdateError(InvalidInputError):
    """수정할 내용이 전달되지 않았습니다."""
    error_code = "NO_UPDATE"


class ForbiddenError(SocialServiceError):
    """해당 작업을 수행할 권한이 없습니다."""
    error_code = "FORBIDDEN"
    status_code = 403


class ConflictError(SocialServiceError):
    """이미 사용 중인 값입니다."""
    error_code = "CONFLICT"
    status_code = 409


class ExternalServiceError(SocialServiceError):
    """
    Firestore 또는 Storage 호출 실패.
    transient=True 이면 호출자가 재시도할 수 있는 실패(타임아웃, 일시적 장애)입니다.
    """
    error_code = "EXTERNAL_SERVICE_FAILURE"

    def __init__(self, message: str = None, transient: bool = False, service: str = None):
        super().__init__(message or "외부 서비스 호출에 실패했습니다.")
        self.transient = transient
        self.service = service

    @property
    def status_code(self) -> int:
        return 503 if self.transient else 502

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["retryable"] = self.transient
        return data
