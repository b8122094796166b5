# battery_scm/config.py
import os


class Settings:
    """
    Very simple settings holder.
    Reads DATABASE_URL from environment if present,
    otherwise defaults to an in-memory sqlite database.
    """

    def __init__(self) -> None:
        self.database_url: str = os.getenv("DATABASE_URL", "sqlite://")
        self.seed_on_startup: bool = os.getenv("SCM_SEED_ON_STARTUP", "true").lower() == "true"
        self.log_level: str = os.getenv("SCM_LOG_LEVEL", "INFO").upper()


settings = Settings()
