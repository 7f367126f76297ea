# app/api/users/services.py
import logging
import uuid
from typing import Optional, Dict, Any, Iterable, List

from werkzeug.security import generate_password_hash

from app.core.exceptions import ConflictError, InvalidInputError, NoUpdateError, NotFoundError
from app.models.media import MediaRef, MediaUpload
from app.models.user import User, SocialLinks
from app.services.document_store import DocumentStore
from app.services.media_lifecycle import MediaLifecycleCoordinator
from app.utils.datetime_utils import DateTimeUtils

SEARCH_LIMIT = 20

class UserService:
    """
    사용자 계정과 프로필(소개, 소셜 링크, 프로필/커버 이미지) 관련 비즈니스 로직을 담당합니다.
    - username / email 의 유일성은 'usernames', 'emails' 예약 문서를 create-if-absent 로 만들어 보장합니다.
    - 프로필/커버 이미지는 MediaLifecycleCoordinator 를 통해 업로드 -> 교체 -> 이전 파일 삭제 순서로 바뀝니다.
    """
    USERNAMES = 'usernames'
    EMAILS = 'emails'

    def __init__(self, document_store: DocumentStore, media: MediaLifecycleCoordinator):
        self.store = document_store
        self.media = media

    # --- 조회 ---
    def get_user(self, user_id: str) -> User:
        data = self.store.get(User.COLLECTION, user_id)
        if not data:
            raise NotFoundError("사용자를 찾을 수 없습니다.")
        return User.from_dict(data)

    def get_summaries(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """사용자 ID 목록에 대한 공개 정보를 한 번에 조회합니다. 존재하지 않는 사용자는 빠집니다."""
        docs = self.store.get_many(User.COLLECTION, user_ids)
        return {user_id: User.from_dict(data).summary() for user_id, data in docs.items()}

    def get_profile(self, user_id: str) -> Dict[str, Any]:
        """프로필 화면용 사용자 정보. followers / following 을 사용자 요약 정보로 조인합니다."""
        user = self.get_user(user_id)
        summaries = self.get_summaries(user.followers + user.following)

        profile = user.summary()
        profile.update({
            "bio": user.bio,
            "social_links": user.to_dict()["social_links"],
            "cover_image_url": user.cover_image.url or None,
            "followers": [summaries[uid] for uid in user.followers if uid in summaries],
            "following": [summaries[uid] for uid in user.following if uid in summaries],
            "follower_count": len(user.followers),
            "following_count": len(user.following),
            "created_at": user.created_at,
        })
        return profile

    def search_users(self, name: str) -> List[Dict[str, Any]]:
        """
        이름이 검색어로 시작하는 사용자를 대소문자 구분 없이 찾습니다. (최대 SEARCH_LIMIT 명)
        Firestore는 부분 문자열 검색을 지원하지 않으므로 소문자 이름 필드에 대한 범위 조건을 사용합니다.
        """
        prefix = (name or "").strip().lower()
        if not prefix:
            raise InvalidInputError("검색어를 1글자 이상 입력해주세요.")
        docs = self.store.find(
            User.COLLECTION,
            filters=[("name_lower", ">=", prefix), ("name_lower", "<=", prefix + "\uf8ff")],
            order_by=[("name_lower", self.store.ASCENDING)],
            limit=SEARCH_LIMIT,
        )
        return [User.from_dict(data).summary() for data in docs]

    def is_username_available(self, username: str) -> bool:
        return self.store.get(self.USERNAMES, username.lower()) is None

    # --- 가입 ---
    def create_user(self, username: str, email: str, name: str, password: str,
                    password_confirm: Optional[str] = None, bio: str = "",
                    social_links: Optional[Dict[str, str]] = None,
                    profile_image: Optional[MediaUpload] = None) -> User:
        """
        새 사용자를 생성합니다.
        1. username, email 예약 (이미 있으면 ConflictError)
        2. (선택) 프로필 이미지 업로드
        3. 사용자 문서 생성
        도중에 실패하면 예약 문서를 해제합니다.
        """
        if password_confirm is not None and password != password_confirm:
            raise InvalidInputError("비밀번호와 비밀번호 확인이 일치하지 않습니다.")

        user_id = str(uuid.uuid4())
        username_key, email_key = username.lower(), email.lower()

        try:
            self.store.create(self.USERNAMES, username_key, {"user_id": user_id})
        except ConflictError:
            raise ConflictError("이미 사용 중인 사용자 이름입니다.")

        try:
            self.store.create(self.EMAILS, email_key, {"user_id": user_id})
        except ConflictError:
            self._release_reservation(self.USERNAMES, username_key)
            raise ConflictError("이미 가입된 이메일입니다.")

        def _create(ref: MediaRef) -> User:
            new_user = User(
                user_id=user_id,
                username=username,
                email=email,
                name=name,
                password_hash=generate_password_hash(password),
                bio=bio or "",
                social_links=SocialLinks(**(social_links or {})),
                profile_image=ref,
                created_at=DateTimeUtils.now(),
            )
            self.store.create(User.COLLECTION, user_id, new_user.to_dict())
            return new_user

        try:
            user = self.media.create_with_asset(profile_image, "profile_image", user_id, _create)
        except Exception:
            self._release_reservation(self.USERNAMES, username_key)
            self._release_reservation(self.EMAILS, email_key)
            raise

        logging.info(f"사용자 생성 완료 (user_id: {user_id}, username: {username})")
        return user

    def _release_reservation(self, collection: str, key: str) -> None:
        try:
            self.store.delete(collection, key)
        except Exception as e:
            logging.error(f"예약 문서 해제 실패 ({collection}/{key}): {e}", exc_info=True)

    # --- 프로필 수정 ---
    def update_profile(self, user_id: str, bio: Optional[str] = None,
                       social_links: Optional[Dict[str, str]] = None,
                       password: Optional[str] = None,
                       password_confirm: Optional[str] = None) -> User:
        """소개, 소셜 링크, 비밀번호를 부분 수정합니다."""
        update_data: Dict[str, Any] = {}
        if bio:
            update_data["bio"] = bio
        if social_links:
            links = SocialLinks(**social_links)
            update_data["social_links"] = {
                "facebook": links.facebook, "instagram": links.instagram, "twitter": links.twitter
            }
        if password:
            if password != password_confirm:
                raise InvalidInputError("비밀번호와 비밀번호 확인이 일치하지 않습니다.")
            update_data["password_hash"] = generate_password_hash(password)

        if not update_data:
            raise NoUpdateError("수정할 내용이 전달되지 않았습니다.")

        self.store.update(User.COLLECTION, user_id, update_data)
        logging.info(f"프로필 수정 완료 (user_id: {user_id}, fields: {list(update_data.keys())})")
        return self.get_user(user_id)

    # --- 프로필 / 커버 이미지 ---
    def _image_swapper(self, user_id: str, field_name: str):
        def _swap(new_ref: MediaRef) -> MediaRef:
            previous = self.store.swap_field(User.COLLECTION, user_id, field_name, new_ref.to_dict())
            return MediaRef.from_dict(previous)
        return _swap

    def replace_profile_image(self, user_id: str, upload: MediaUpload) -> MediaRef:
        self.get_user(user_id)
        return self.media.replace_asset(self._image_swapper(user_id, "profile_image"), upload, "profile_image", user_id)

    def replace_cover_image(self, user_id: str, upload: MediaUpload) -> MediaRef:
        self.get_user(user_id)
        return self.media.replace_asset(self._image_swapper(user_id, "cover_image"), upload, "cover_image", user_id)

    def remove_profile_image(self, user_id: str) -> None:
        self.media.remove_asset(self._image_swapper(user_id, "profile_image"), "profile_image")

    def remove_cover_image(self, user_id: str) -> None:
        self.media.remove_asset(self._image_swapper(user_id, "cover_image"), "cover_image")
