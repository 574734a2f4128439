import os

from . import db_config_from_env, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env("staff_reporting")

# Staff-facing dates ("today") are computed in this timezone.
TIMEZONE = os.getenv("APP_TIMEZONE", "Asia/Tokyo")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

DEBUG = True

# Apply schema.sql on startup (idempotent: CREATE TABLE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", True)
# Also create the demo manager/staff accounts
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", False)
