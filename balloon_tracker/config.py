"""
Configuration for the WindBorne proxy and the snapshot ingestion client
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
load_dotenv()


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    return float(value)


@dataclass
class TrackerConfig:
    """Settings shared by the proxy server, the ingestor and the CLI"""

    # Upstream
    UPSTREAM_BASE_URL: str = "https://a.windbornesystems.com"
    USER_AGENT: str = "balloons-proxy/1.0"
    # None leaves requests without a timeout, same as a plain fetch
    UPSTREAM_TIMEOUT: Optional[float] = None

    # Browsers never cache, the edge keeps 60s and serves stale for 300s more
    CACHE_CONTROL: str = "max-age=0, s-maxage=60, stale-while-revalidate=300"

    # Ingestion client
    SNAPSHOT_BASE_URL: str = "http://127.0.0.1:5000/api/wb/treasure"
    OPEN_METEO_URL: str = "https://api.open-meteo.com/v1/forecast"

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 5000
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "TrackerConfig":
        """Create configuration from environment variables"""
        return cls(
            UPSTREAM_BASE_URL=os.getenv("UPSTREAM_BASE_URL", cls.UPSTREAM_BASE_URL).rstrip("/"),
            USER_AGENT=os.getenv("USER_AGENT", cls.USER_AGENT),
            UPSTREAM_TIMEOUT=_optional_float(os.getenv("UPSTREAM_TIMEOUT")),
            CACHE_CONTROL=os.getenv("CACHE_CONTROL", cls.CACHE_CONTROL),
            SNAPSHOT_BASE_URL=os.getenv("SNAPSHOT_BASE_URL", cls.SNAPSHOT_BASE_URL).rstrip("/"),
            OPEN_METEO_URL=os.getenv("OPEN_METEO_URL", cls.OPEN_METEO_URL),
            HOST=os.getenv("HOST", cls.HOST),
            PORT=int(os.getenv("PORT", str(cls.PORT))),
            DEBUG=os.getenv("DEBUG", "0").strip().lower() in {"1", "true", "yes"},
            LOG_LEVEL=os.getenv("LOG_LEVEL", cls.LOG_LEVEL).upper(),
        )
