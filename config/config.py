"""Settings shared by every environment; overridden per APP_ENV module."""
import os


def env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


APP_TITLE = os.environ.get("APP_TITLE", "Client Records")

# Session-signing secret and the single operator password
SECRET_KEY = os.environ.get("SESSION_SECRET") or os.environ.get("SECRET_KEY") or "client-records-secret-change-in-production"
SYSTEM_PASSWORD = os.environ.get("SYSTEM_PASSWORD", "")
SYSTEM_PASSWORD_HASH = os.environ.get("SYSTEM_PASSWORD_HASH", "")

# Storage: 'mysql' or 'file'
STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "mysql")
CLIENTS_FILE = os.environ.get("CLIENTS_FILE", "data/clients.json")

# DB connection (DATABASE_URL wins when set)
DATABASE_URL = os.environ.get("DATABASE_URL", "")
DB_CONFIG = {
    "host": os.environ.get("DB_HOST", "localhost"),
    "port": int(os.environ.get("DB_PORT", "3306")),
    "user": os.environ.get("DB_USER", "root"),
    "password": os.environ.get("DB_PASSWORD", ""),
    "database": os.environ.get("DB_NAME", "client_records"),
}

# Sessions: 'memory' or 'mysql'
SESSION_BACKEND = os.environ.get("SESSION_BACKEND", "memory")
SESSION_LIFETIME_HOURS = int(os.environ.get("SESSION_LIFETIME_HOURS", "24"))
SESSION_COOKIE_SAMESITE = "Lax"
SESSION_COOKIE_SECURE = False

LOG_LEVEL = os.environ.get("LOG_LEVEL", "")
TRUST_PROXY = False
AUTO_INIT_DB = False
DEBUG = False
