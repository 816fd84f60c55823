from pathlib import Path
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

# Load .env from repo root for local development and scripts.
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(dotenv_path=ENV_PATH)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True, populate_by_name=True)
    db_path: str = Field(default="./data/folio.db", alias="DB_PATH")
    local_tz: str = Field(default="UTC", alias="LOCAL_TZ")
    default_import_source: str = Field(default="kubera", alias="DEFAULT_IMPORT_SOURCE")
    drift_notable_pct: float = Field(default=0.5, alias="DRIFT_NOTABLE_PCT")
    session_ttl_hours: int = Field(default=720, alias="SESSION_TTL_HOURS")
    password_hash_rounds: int = Field(default=12, alias="PASSWORD_HASH_ROUNDS")
    reports_schedule_enabled: int = Field(default=0, alias="REPORTS_SCHEDULE_ENABLED")
    reports_weekday: str = Field(default="mon", alias="REPORTS_WEEKDAY")
    reports_hour: int = Field(default=7, alias="REPORTS_HOUR")
    reports_minute: int = Field(default=30, alias="REPORTS_MINUTE")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_error_file: str = Field(default="", alias="LOG_ERROR_FILE")

settings = Settings()
