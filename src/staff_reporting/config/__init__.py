import os


def get_settings_module() -> str:
    """Settings module selected by APP_ENV (development unless told otherwise)."""

    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "staff_reporting.config.production"

    if env in {"test", "testing"}:
        return "staff_reporting.config.testing"

    return "staff_reporting.config.development"


def db_config_from_env(default_name: str) -> dict:
    """MySQL connection settings from DB_* variables."""

    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", ""),
        "database": os.getenv("DB_NAME", default_name),
    }


def env_flag(name: str, default: bool) -> bool:
    return bool(int(os.getenv(name, "1" if default else "0")))
