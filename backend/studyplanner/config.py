import logging
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # MongoDB Configuration
    mongodb_url: str = Field(default="mongodb://localhost:27017", alias="MONGODB_URL")
    mongodb_db_name: str = Field(default="study_planner", alias="MONGODB_DB_NAME")
    mongodb_server_selection_timeout_ms: int = Field(
        default=5000, alias="MONGODB_SERVER_SELECTION_TIMEOUT_MS"
    )

    # Application Settings
    app_name: str = Field(default="Study Planner", alias="APP_NAME")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Calendar Configuration
    timezone: str = Field(default="UTC", alias="TIMEZONE")

    # Course task regeneration
    regeneration_use_transaction: bool = Field(
        default=False, alias="REGENERATION_USE_TRANSACTION"
    )

    # Workload overview
    upcoming_window_days: int = Field(default=7, ge=1, alias="UPCOMING_WINDOW_DAYS")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def get_tzinfo(self) -> tzinfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown TIMEZONE %r, falling back to UTC", self.timezone)
            return ZoneInfo("UTC")


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


settings = Settings()
