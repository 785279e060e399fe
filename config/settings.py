"""Configuration settings for the Scholar venue analyzer.

Handles Scholar endpoints, HTTP behaviour and load timing.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

# Project root directory
ROOT_DIR = Path(__file__).parent.parent


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Scholar endpoints
    scholar_base_url: str = os.getenv("SCHOLAR_BASE_URL", "https://scholar.google.com")
    scholar_language: str = os.getenv("SCHOLAR_LANGUAGE", "en")
    scholar_page_size: int = int(os.getenv("SCHOLAR_PAGE_SIZE", "100"))

    # HTTP settings
    request_timeout: int = int(os.getenv("REQUEST_TIMEOUT", "30"))
    request_max_retries: int = int(os.getenv("REQUEST_MAX_RETRIES", "3"))
    request_retry_delay: float = float(os.getenv("REQUEST_RETRY_DELAY", "1.0"))
    user_agent: str = os.getenv(
        "USER_AGENT",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    )

    # Incremental loading
    max_load_attempts: int = int(os.getenv("MAX_LOAD_ATTEMPTS", "200"))
    per_attempt_timeout: float = float(os.getenv("PER_ATTEMPT_TIMEOUT", "10.0"))
    settle_delay: float = float(os.getenv("SETTLE_DELAY", "0.3"))
    final_settle_delay: float = float(os.getenv("FINAL_SETTLE_DELAY", "0.5"))

    # Browser settings
    browser_headless: bool = os.getenv("BROWSER_HEADLESS", "true").lower() != "false"

    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
