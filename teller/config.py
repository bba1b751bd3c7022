"""
Application Configuration.

Pydantic Settings model for the teller customer-search desk.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Customer registry (Supabase) ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")

    # --- Local registry mirror ---
    SQLITE_PATH: str = "teller_local.db"

    # --- Message broker health endpoint ---
    BROKER_HEALTH_URL: str = ""
    BROKER_HEALTH_TIMEOUT_S: float = 2.0

    # --- Search policy ---
    MIN_SEARCH_FILTERS: int = Field(default=2, ge=1)
    SEARCH_ENRICHMENT_WORKERS: int = Field(default=1, ge=1, le=32)

    # --- Cards ---
    CARD_ISSUER_NAME: str = "Banco Nacional"

    # --- Audit ---
    AUDIT_HISTORY_LIMIT: int = Field(default=100, ge=1)

    # --- Response-time thresholds (milliseconds) ---
    PERFORMANCE_THRESHOLDS_MS: dict[str, float] = Field(default_factory=lambda: {
        "customer_search": 3000.0,
        "customer_detail": 2000.0,
        "card_retrieval": 2000.0,
        "navigation": 1000.0,
    })

    # --- Logging ---
    LOG_FILE: str = "teller.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @model_validator(mode="after")
    def _warn_degraded_modes(self) -> "AppConfig":
        """Log which external systems the desk will run without."""
        log = logging.getLogger("teller.config")
        if not self.SUPABASE_URL:
            log.warning(
                "SUPABASE_URL is empty. Registry queries will be served "
                "from the local SQLite mirror."
            )
        if not self.BROKER_HEALTH_URL:
            log.warning(
                "BROKER_HEALTH_URL is empty. The broker health probe is "
                "skipped and reported as connected."
            )
        return self

    def threshold_for(self, operation: str) -> Optional[float]:
        """Return the response-time threshold (ms) for *operation*, if any."""
        return self.PERFORMANCE_THRESHOLDS_MS.get(operation)


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Process-wide ``AppConfig``, built from the environment on first use.

    Services take their settings through ``create_services(config=...)``;
    this accessor serves the logger and the CLI composition root.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
