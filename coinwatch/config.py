from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from dotenv import load_dotenv

load_dotenv()

_MS_PER_HOUR = 60 * 60 * 1000


@dataclass(slots=True)
class Settings:
    """Central configuration driven by environment variables."""

    coingecko_base_url: str = os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3")
    request_timeout_seconds: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "15"))
    top_n_assets: int = int(os.getenv("TOP_N_ASSETS", "10"))
    vs_currency: str = os.getenv("VS_CURRENCY", "usd")

    chart_days: int = int(os.getenv("CHART_DAYS", "1"))
    chart_window_hours: float = float(os.getenv("CHART_WINDOW_HOURS", "4"))
    display_tz: str = os.getenv("DISPLAY_TZ", "UTC")

    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    dashboard_api_base_url: str | None = os.getenv("API_BASE_URL")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def chart_window_ms(self) -> int:
        return int(self.chart_window_hours * _MS_PER_HOUR)

    @property
    def resolved_api_base_url(self) -> str:
        if self.dashboard_api_base_url:
            return self.dashboard_api_base_url.rstrip("/")
        return f"http://{self.api_host}:{self.api_port}"


# Singleton-style settings import
settings: Final[Settings] = Settings()
