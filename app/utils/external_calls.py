# app/utils/external_calls.py
"""
Firestore / Storage 호출 시 발생하는 Google API 예외를 도메인 예외로 변환합니다.

- 타임아웃, 429, 500, 503, 504, 연결 오류 -> ExternalServiceError(transient=True)
- NotFound -> NotFoundError, AlreadyExists/Conflict -> ConflictError
- 그 외 Google API 오류 -> ExternalServiceError(transient=False)
"""

import logging
from contextlib import contextmanager

import requests
from google.api_core import exceptions as google_exceptions

from app.core.exceptions import ConflictError, ExternalServiceError, NotFoundError

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    google_exceptions.DeadlineExceeded,
    google_exceptions.ServiceUnavailable,
    google_exceptions.TooManyRequests,
    google_exceptions.InternalServerError,
    google_exceptions.GatewayTimeout,
    google_exceptions.RetryError,
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
    TimeoutError,
    ConnectionError,
)


def is_transient(error: Exception) -> bool:
    """재시도하면 성공할 수 있는 실패인지 판단합니다."""
    return isinstance(error, TRANSIENT_ERRORS)


@contextmanager
def external_call(service: str, action: str):
    """
    외부 서비스 호출 구간을 감싸 예외를 변환합니다.

    :param service: 'firestore' 또는 'storage'
    :param action: 로그에 남길 작업 설명 (예: "posts/abc update")
    """
    try:
        yield
    except google_exceptions.NotFound as e:
        raise NotFoundError(f"{action}: 대상을 찾을 수 없습니다.") from e
    except (google_exceptions.AlreadyExists, google_exceptions.Conflict) as e:
        raise ConflictError(f"{action}: 이미 존재합니다.") from e
    except TRANSIENT_ERRORS as e:
        logger.warning(f"{service} 일시적 오류 ({action}): {e}")
        raise ExternalServiceError(f"{service} 호출이 일시적으로 실패했습니다.", transient=True, service=service) from e
    except google_exceptions.GoogleAPIError as e:
        logger.error(f"{service} 호출 실패 ({action}): {e}", exc_info=True)
        raise ExternalServiceError(f"{service} 호출에 실패했습니다.", transient=False, service=service) from e
