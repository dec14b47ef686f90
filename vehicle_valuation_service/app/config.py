# Application Configuration using Pydantic BaseSettings
import logging
from typing import Optional

from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    # MongoDB
    MONGO_DETAILS: str = "mongodb://mongo:27017"
    DB_NAME: str = "vehicle_valuation_db"
    VALUATIONS_COLLECTION: str = "valuations"
    WORKFLOW_TABLE_COLLECTION: str = "workflow_table"
    OPTIMISTIC_CONCURRENCY: bool = True

    # Blob storage (GridFS bucket) and the base URL files are served from
    BLOB_BUCKET_NAME: str = "valuation_files"
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # RC lookup service
    RC_LOOKUP_URL: Optional[str] = None  # e.g., https://api.attestr.com/api/v2/public/checkx/rc
    RC_LOOKUP_API_KEY: Optional[str] = None

    # OpenAI-compatible valuation assistant
    OPENAI_BASE_URL: str = "https://api.openai.com"
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    AI_VALUATION_MAX_RETRIES: int = 5

    # Outbound HTTP
    DEFAULT_HTTP_TIMEOUT: float = 30.0

    # Observability
    LOG_LEVEL: str = "INFO"
    OTEL_EXPORTER_OTLP_TRACES_ENDPOINT: Optional[str] = None
    OTEL_EXPORTER_OTLP_METRICS_ENDPOINT: Optional[str] = None
    OTEL_CONSOLE_EXPORT: bool = True
    OTEL_METRIC_EXPORT_INTERVAL_MS: int = 5000
    SERVICE_NAME_API: str = "vehicle-valuation-api"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

# Instantiate settings to be imported by the composition root (startup, DI providers)
settings = AppSettings()

logger = logging.getLogger(__name__)
# Secrets (API keys) live in these settings, so the values themselves are never logged.
logger.info("Application settings module initialized.")
