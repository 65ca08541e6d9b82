# qjob_tracker/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Optional
import logging
from pathlib import Path

# Configure logging for settings module
logger = logging.getLogger(__name__)
if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s SETTINGS.PY - [%(levelname)s] - %(message)s'
    )

# This settings.py file is at <project>/qjob_tracker/settings.py
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
DOTENV_PATH = PROJECT_ROOT / ".env"

if DOTENV_PATH.exists():
    logger.info(f"SETTINGS.PY: .env file FOUND at explicit path: {DOTENV_PATH}")
else:
    logger.debug(
        f"SETTINGS.PY: .env file NOT FOUND at explicit path: {DOTENV_PATH}. "
        "Will rely on OS env vars or defaults."
    )


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    app_name: str = "Quantum Job Tracker API"
    debug_mode: bool = False
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 5000

    # SQLite configuration for the user directory
    sqlite_db_path: str = "./qjob_tracker_data.sqlite3"

    # Realtime session registry: "memory" keeps bindings in this process,
    # "redis" shares them between server instances
    session_backend: str = "memory"
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None
    realtime_sessions_redis_key: str = "qjob:realtime_sessions"

    # External quantum provider. Fixed configuration, never taken from users.
    provider_token_url: str = "https://iam.cloud.ibm.com/identity/token"
    provider_api_key_grant_type: str = "urn:ibm:params:oauth:grant-type:apikey"
    provider_jobs_url: str = "https://quantum.cloud.ibm.com/api/v1/jobs"
    provider_service_crn_header: str = "Service-CRN"
    provider_timeout_seconds: float = Field(
        default=30.0,
        description="Upper bound for each call made while validating provider credentials."
    )

    # bcrypt cost factor used for new password hashes
    password_hash_rounds: int = 10

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(
        env_file=DOTENV_PATH if DOTENV_PATH.exists() else None,
        extra="ignore",
        env_file_encoding='utf-8'
    )


# Initialize settings instance
settings = Settings()

logger.info(
    f"SETTINGS.PY: Post-Settings() settings.debug_mode: "
    f"{settings.debug_mode} (Type: {type(settings.debug_mode)})"
)
logger.info(
    f"SETTINGS.PY: Post-Settings() settings.session_backend: "
    f"'{settings.session_backend}' (Type: {type(settings.session_backend)})"
)
logger.info(
    f"SETTINGS.PY: Post-Settings() settings.sqlite_db_path: '{settings.sqlite_db_path}'"
)
