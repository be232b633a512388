"""
Application configuration using environment variables.
"""
import os
from dataclasses import dataclass
from dotenv import load_dotenv

# Load .env file
load_dotenv()


@dataclass
class Settings:
    """Application settings."""
    APP_NAME: str = "webperf"

    # HTTP client settings
    HTTP_TIMEOUT: int = int(os.getenv("WEBPERF_HTTP_TIMEOUT", "15"))
    HTTP_MAX_RETRIES: int = int(os.getenv("WEBPERF_HTTP_MAX_RETRIES", "2"))
    HTTP_MAX_REDIRECTS: int = int(os.getenv("WEBPERF_HTTP_MAX_REDIRECTS", "5"))
    USER_AGENT: str = os.getenv(
        "WEBPERF_USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (compatible; webperf/1.0)"
    )

    # Page size cap in bytes (10 MB)
    MAX_PAGE_SIZE: int = int(os.getenv("WEBPERF_MAX_PAGE_SIZE", str(10 * 1024 * 1024)))

    # Deadline for the whole batch of rule modules
    AUDIT_TIMEOUT_MS: int = int(os.getenv("WEBPERF_AUDIT_TIMEOUT_MS", "60000"))

    # Reports
    OUTPUT_DIR: str = os.getenv("WEBPERF_OUTPUT_DIR", "./web-perf-reports")

    LOG_LEVEL: str = os.getenv("WEBPERF_LOG_LEVEL", "INFO")


settings = Settings()
