# hardware_store/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    # Presence of DATABASE_URL selects PostgreSQL, otherwise the local SQLite file is used
    DATABASE_URL: Optional[str] = None
    DATABASE_SSL: bool = False
    SQLITE_PATH: str = "hardware_inventory.db"

    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440

    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"

    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"
    BACKUP_DIR: str = "backups"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

    @property
    def database_url(self) -> Optional[str]:
        url = (self.DATABASE_URL or "").strip()
        if not url:
            return None
        # SQLAlchemy requires postgresql:// (hosting providers hand out postgres://)
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url

settings = Settings()
