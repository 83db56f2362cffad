import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    database_url: str = "sqlite+aiosqlite:///./homestay.db"
    database_echo: bool = False

    # Auth
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 30

    # Geocoder (Google Geocoding API compatible)
    geocoder_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    geocoder_api_key: str = ""
    geocoder_region: str = ""
    geocoder_timeout_seconds: float = 5.0

    # Uploads
    file_upload_path: str = "./public/uploads"
    max_file_upload: int = 1_000_000  # bytes

    # Listing defaults
    default_page_limit: int = 25
    max_page_limit: int = 100

    # Rate limiting settings
    rate_limit_enabled: bool = True  # Killswitch for quick disable

    cors_origins: list[str] = ["*"]

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "console"  # Options: "console", "json"
    log_slow_request_threshold_ms: int = 500  # Log timing only if duration > threshold

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Build settings from the process environment (and `.env` if present)."""
        load_dotenv(env_file)

        def flag(name: str, default: str) -> bool:
            return os.environ.get(name, default).lower() == "true"

        origins = os.environ.get("CORS_ORIGINS", "*")

        return cls(
            database_url=os.environ.get(
                "DATABASE_URL", "sqlite+aiosqlite:///./homestay.db"
            ),
            database_echo=flag("DATABASE_ECHO", "false"),
            jwt_secret=os.environ.get("JWT_SECRET", "change-me"),
            jwt_algorithm=os.environ.get("JWT_ALGORITHM", "HS256"),
            access_token_expire_minutes=int(
                os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 30))
            ),
            geocoder_url=os.environ.get(
                "GEOCODER_URL", "https://maps.googleapis.com/maps/api/geocode/json"
            ),
            geocoder_api_key=os.environ.get("GEOCODER_API_KEY", ""),
            geocoder_region=os.environ.get("GEOCODER_REGION", ""),
            geocoder_timeout_seconds=float(
                os.environ.get("GEOCODER_TIMEOUT_SECONDS", "5")
            ),
            file_upload_path=os.environ.get("FILE_UPLOAD_PATH", "./public/uploads"),
            max_file_upload=int(os.environ.get("MAX_FILE_UPLOAD", "1000000")),
            default_page_limit=int(os.environ.get("DEFAULT_PAGE_LIMIT", "25")),
            max_page_limit=int(os.environ.get("MAX_PAGE_LIMIT", "100")),
            rate_limit_enabled=flag("RATE_LIMIT_ENABLED", "true"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            log_format=os.environ.get("LOG_FORMAT", "console"),
            log_slow_request_threshold_ms=int(
                os.environ.get("LOG_SLOW_REQUEST_THRESHOLD_MS", "500")
            ),
        )
