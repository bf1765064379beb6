from pydantic_settings import BaseSettings
from pathlib import Path
from typing import List, Optional

# Get the repository root directory (parent of sitecms directory)
REPO_ROOT = Path(__file__).parent.parent.absolute()

class Settings(BaseSettings):
    """Application settings."""

    # API settings
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_RELOAD: bool = True
    API_PREFIX: str = "/api"

    # Version and environment
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database settings
    DATABASE_URL: str = f"sqlite:///{REPO_ROOT / 'storage' / 'sitecms.db'}"

    # Upload settings
    STORAGE_TYPE: str = "filesystem"  # "filesystem" or "s3"
    UPLOAD_DIR: str = str(REPO_ROOT / "storage" / "uploads")
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_SIZE_MB: int = 15

    # S3 settings (only used if STORAGE_TYPE = "s3")
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"
    S3_BUCKET: str = "sitecms-uploads"

    # Bearer tokens accepted on admin endpoints
    ADMIN_TOKENS: List[str] = []

    # Rate limits per client address, in "<count>/<period>" notation
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_CONTACT: str = "3/hour"
    RATE_LIMIT_UPLOADS: str = "10/hour"

    # Client settings
    API_URL: Optional[str] = None  # explicit API origin, e.g. "http://localhost:8000"
    PUBLIC_ORIGIN: Optional[str] = None  # origin the site itself is served from
    JSON_TIMEOUT_SECONDS: float = 30.0
    UPLOAD_TIMEOUT_SECONDS: float = 60.0
    CACHE_STALE_SECONDS: float = 120.0
    CACHE_TIME_SECONDS: float = 300.0

    class Config:
        env_file = ".env"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

settings = Settings()
