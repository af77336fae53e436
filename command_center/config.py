# command_center/config.py
"""
Environment configuration.
All settings are read once from the environment (and .env) here; create_app()
copies them into app.config and accepts overrides on top.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# 项目根目录（绝对路径）
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite:///{os.path.join(BASE_DIR, 'command_center.db')}",
)
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
SESSION_FILE_DIR = os.getenv("SESSION_FILE_DIR", os.path.join(BASE_DIR, "flask_session"))

# Blob store
UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(BASE_DIR, "uploads"))
ATTACHMENT_BASE_URL = os.getenv("ATTACHMENT_BASE_URL", "/attachments")
MAX_ATTACHMENTS_PER_ITEM = int(os.getenv("MAX_ATTACHMENTS_PER_ITEM", 5))
MAX_ATTACHMENT_SIZE = int(os.getenv("MAX_ATTACHMENT_SIZE", 25 * 1024 * 1024))  # 25MB

# Identity
AUTH_MODE = os.getenv("AUTH_MODE", "password")  # password | sso
LOGIN_EMAIL = os.getenv("LOGIN_EMAIL", "").strip().lower()
LOGIN_PASSWORD_HASH = os.getenv("LOGIN_PASSWORD_HASH", "")
ALLOWED_DOMAIN = os.getenv("ALLOWED_DOMAIN", "macproducts.net")
SSO_JWKS_URL = os.getenv("SSO_JWKS_URL", "")
SSO_CLIENT_ID = os.getenv("SSO_CLIENT_ID", "")

# Session key holding the signed-in email
SESSION_USER_KEY = "mac_user"

SEED_FILE = os.getenv("SEED_FILE", "")
LOG_DIR = os.getenv("LOG_DIR", "logs")


def as_dict() -> dict:
    """Settings in the shape app.config expects."""
    return {
        "DATABASE_URL": DATABASE_URL,
        "SECRET_KEY": SECRET_KEY,
        "SESSION_FILE_DIR": SESSION_FILE_DIR,
        "UPLOAD_FOLDER": UPLOAD_FOLDER,
        "ATTACHMENT_BASE_URL": ATTACHMENT_BASE_URL,
        "MAX_ATTACHMENTS_PER_ITEM": MAX_ATTACHMENTS_PER_ITEM,
        "MAX_ATTACHMENT_SIZE": MAX_ATTACHMENT_SIZE,
        "AUTH_MODE": AUTH_MODE,
        "LOGIN_EMAIL": LOGIN_EMAIL,
        "LOGIN_PASSWORD_HASH": LOGIN_PASSWORD_HASH,
        "ALLOWED_DOMAIN": ALLOWED_DOMAIN,
        "SSO_JWKS_URL": SSO_JWKS_URL,
        "SSO_CLIENT_ID": SSO_CLIENT_ID,
        "SEED_FILE": SEED_FILE,
    }
