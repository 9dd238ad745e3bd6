import os
from dotenv import load_dotenv

# Load variables from a local .env file, if present
load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}")


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Runtime configuration read from the environment."""

    def __init__(self):
        self.environment = os.getenv("ENVIRONMENT", "development")

        # Database
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./inventory.db")
        self.log_sql_queries = _bool_env("LOG_SQL_QUERIES", False)
        self.lock_timeout_seconds = _int_env("LOCK_TIMEOUT_SECONDS", 10)

        # Reservations
        self.reservation_expiry_minutes = _int_env("RESERVATION_EXPIRY_MINUTES", 10)
        if self.reservation_expiry_minutes <= 0:
            raise ValueError("RESERVATION_EXPIRY_MINUTES must be positive")

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # Server
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = _int_env("PORT", 8000)
        self.debug = _bool_env("DEBUG", False)


settings = Settings()
