'''“组装 Flask App 的工厂”（不启动，不产生行为副作用）
负责注入配置、初始化 engine / session / blob store、注册蓝图和 error handler；
不负责启动服务（不调用 app.run()），会被 run.py、gunicorn 和单元测试调用'''
# command_center/app_factory.py
import os

from flask import Flask, jsonify
from flask_session import Session

from command_center import config
from command_center.db.session import configure_engine
from command_center.errors import ErrorType
from command_center.logger import get_logger
from command_center.services.blob_store import LocalBlobStore

logger = get_logger(__name__)


def create_app(overrides=None):
    """应用工厂函数；overrides 覆盖环境配置（测试用）"""
    app = Flask(__name__)

    # 基础配置
    app.config.update(config.as_dict())
    if overrides:
        app.config.update(overrides)

    # 确保 SECRET_KEY 是字符串类型（不是 bytes）
    secret_key = app.config["SECRET_KEY"]
    if isinstance(secret_key, bytes):
        app.config["SECRET_KEY"] = secret_key.decode("utf-8")

    # 数据库
    configure_engine(app.config["DATABASE_URL"])

    # 上传大小：单个附件上限 + multipart 开销
    app.config["MAX_CONTENT_LENGTH"] = app.config["MAX_ATTACHMENT_SIZE"] + 1024 * 1024

    # Session 配置
    app.config["SESSION_TYPE"] = "filesystem"
    app.config["SESSION_PERMANENT"] = False
    app.config["SESSION_KEY_PREFIX"] = "command_center:"
    os.makedirs(app.config["SESSION_FILE_DIR"], exist_ok=True)

    # 初始化 Session
    Session(app)

    # 附件存储
    app.extensions["blob_store"] = LocalBlobStore(
        app.config["UPLOAD_FOLDER"],
        app.config["ATTACHMENT_BASE_URL"],
    )

    # 注册蓝图
    from command_center.routes.auth import auth_bp
    from command_center.routes.project import project_bp
    from command_center.routes.editor import editor_bp
    from command_center.routes.punch_list import punch_list_bp
    from command_center.routes.calendar import calendar_bp
    from command_center.routes.audit import audit_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(project_bp)
    app.register_blueprint(editor_bp)
    app.register_blueprint(punch_list_bp)
    app.register_blueprint(calendar_bp)
    app.register_blueprint(audit_bp)

    # 注册错误处理
    register_error_handlers(app)

    logger.info(f"App created, database: {app.config['DATABASE_URL']}")
    return app


def register_error_handlers(app):
    """注册错误处理器"""
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not found", "errorType": ErrorType.NOT_FOUND.value}), 404

    @app.errorhandler(413)
    def too_large(error):
        return jsonify({
            "error": "File size exceeds upload limit",
            "errorType": ErrorType.VALIDATION_ERROR.value,
        }), 413

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal error: {error}")
        return jsonify({"error": "Internal server error", "errorType": None}), 500
