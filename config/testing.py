from config.config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"
SYSTEM_PASSWORD = "test-password"
SYSTEM_PASSWORD_HASH = ""

DEBUG = False
TESTING = True

STORAGE_BACKEND = "file"
SESSION_BACKEND = "memory"
DATABASE_URL = ""
AUTO_INIT_DB = False
