# app/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from typing import Optional
from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials

# - 설정 및 도메인 예외
from app.core.config import config_by_name
from app.core.exceptions import SocialServiceError

# - API 블루프린트
from app.api.users.routes import users_bp
from app.api.follows.routes import follows_bp
from app.api.posts.routes import posts_bp
from app.api.comments.routes import comments_bp
from app.api.feed.routes import feed_bp

# - 서비스 모듈
from app.services.document_store import DocumentStore
from app.services.storage_service import StorageService
from app.services.media_lifecycle import MediaLifecycleCoordinator
from app.services.like_service import LikeService
from app.api.users.services import UserService
from app.api.follows.services import FollowService
from app.api.comments.services import CommentService
from app.api.posts.services import PostService
from app.api.feed.services import FeedService

def _init_firebase(app: Flask):
    if not firebase_admin._apps:
        cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
        if not cred_path or not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
        cred = credentials.Certificate(cred_path)
        firebase_admin.initialize_app(cred, {
            'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
        })

def create_app(config_name: Optional[str] = None,
               document_store: Optional[DocumentStore] = None,
               storage_service: Optional[StorageService] = None):
    """
    Flask 애플리케이션 팩토리 함수.

    document_store / storage_service 를 넘기면 Firebase 초기화 없이 해당 인스턴스를 사용합니다.
    (테스트나 다른 저장소 어댑터를 주입할 때 사용)
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    JWTManager(app)

    if document_store is None or storage_service is None:
        _init_firebase(app)

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 다른 서비스의 기반이 되는 저장소 어댑터를 먼저 생성
    if document_store is None:
        try:
            document_store = DocumentStore()
            document_store.init_app(app)
            logging.info("Document store initialized successfully")
        except Exception as e:
            logging.error(f"Failed to initialize document store: {e}")
            raise
    app.services['documents'] = document_store

    if storage_service is None:
        try:
            storage_service = StorageService()
            storage_service.init_app(app)
            logging.info("Storage service initialized successfully")
        except Exception as e:
            logging.error(f"Failed to initialize storage service: {e}")
            raise
    app.services['storage'] = storage_service

    app.services['media'] = MediaLifecycleCoordinator(storage_service)
    app.services['likes'] = LikeService(document_store)

    # 5-2. 다른 서비스를 주입받아야 하는 도메인 서비스 생성
    app.services['users'] = UserService(document_store, app.services['media'])
    app.services['follows'] = FollowService(document_store)
    app.services['comments'] = CommentService(
        document_store, app.services['media'], app.services['likes'], app.services['users']
    )
    app.services['posts'] = PostService(
        document_store, app.services['media'], app.services['likes'], app.services['comments']
    )
    app.services['feed'] = FeedService(document_store, app.services['users'])

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(follows_bp, url_prefix='/api/users')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')
    app.register_blueprint(comments_bp, url_prefix='/api/posts')
    app.register_blueprint(feed_bp, url_prefix='/api/feed')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(SocialServiceError)
    def handle_service_error(err):
        if err.status_code >= 500:
            logging.error(f"External service failure: {err}", exc_info=err)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        if isinstance(err, HTTPException):
            return err
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
