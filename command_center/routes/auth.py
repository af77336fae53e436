# command_center/routes/auth.py
from flask import Blueprint, current_app, jsonify, request, session

from command_center.config import SESSION_USER_KEY
from command_center.errors import AuthenticationError, ErrorType
from command_center.logger import get_logger
from command_center.routes.helpers import current_user, json_error
from command_center.services.auth_service import AuthService

logger = get_logger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="")


def _auth_service() -> AuthService:
    return AuthService.from_config(current_app.config)


def _sign_in(email: str):
    session.clear()
    session[SESSION_USER_KEY] = email
    logger.info(f"[auth] signed in: {email}")
    return jsonify({"user": email})


@auth_bp.route("/login", methods=["POST"])
def login():
    """邮箱 + 密码登录"""
    if current_app.config["AUTH_MODE"] != "password":
        return json_error("Password sign-in is disabled", ErrorType.AUTH_ERROR, 400)

    payload = request.get_json(silent=True) or {}
    email = payload.get("email", "")
    password = payload.get("password", "")
    if not email or not password:
        return json_error("Please enter your email and password", ErrorType.VALIDATION_ERROR, 400)

    try:
        user = _auth_service().authenticate_password(email=email, password=password)
    except AuthenticationError as e:
        return json_error(str(e), ErrorType.AUTH_ERROR, 401)
    return _sign_in(user)


@auth_bp.route("/login/sso", methods=["POST"])
def login_sso():
    """SSO 登录：前端弹窗拿到 ID token 后提交"""
    if current_app.config["AUTH_MODE"] != "sso":
        return json_error("SSO sign-in is disabled", ErrorType.AUTH_ERROR, 400)

    payload = request.get_json(silent=True) or {}
    token = payload.get("idToken", "")
    if not token:
        return json_error("Missing ID token", ErrorType.VALIDATION_ERROR, 400)

    try:
        user = _auth_service().authenticate_token(token)
    except AuthenticationError as e:
        return json_error(str(e), ErrorType.AUTH_ERROR, 401)
    return _sign_in(user)


@auth_bp.route("/logout", methods=["POST"])
def logout():
    """登出"""
    user = current_user()
    session.clear()
    if user:
        logger.info(f"[auth] signed out: {user}")
    return jsonify({"user": None})


@auth_bp.route("/me")
def me():
    return jsonify({
        "user": current_user(),
        "authMode": current_app.config["AUTH_MODE"],
    })
