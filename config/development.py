import os

from config.config import *  # noqa: F401,F403
from config.config import env_flag

DEBUG = env_flag("DEBUG", "1")

# Dev default: no database needed, clients live in a JSON file
STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "file")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
