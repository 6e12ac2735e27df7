import os

from config.config import *  # noqa: F401,F403
from config.config import env_flag

DEBUG = False

# HTTPS terminates at the proxy; cookies must still be marked secure
SESSION_COOKIE_SECURE = True
SESSION_COOKIE_SAMESITE = "Lax"
TRUST_PROXY = env_flag("TRUST_PROXY", "1")

SESSION_BACKEND = os.environ.get("SESSION_BACKEND", "mysql")
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
