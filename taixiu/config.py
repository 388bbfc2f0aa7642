from pydantic_settings import BaseSettings
import os

DEFAULT_UPSTREAM = "https://taixiumd5.system32-cloudfare-356783752985678522.monster/api/md5luckydice/GetSoiCau"


class Settings(BaseSettings):
    upstream_url: str = os.getenv("UPSTREAM_URL", DEFAULT_UPSTREAM)
    poll_interval: float = float(os.getenv("POLL_INTERVAL", 4.0))
    fetch_retries: int = int(os.getenv("FETCH_RETRIES", 3))
    fetch_delay: float = float(os.getenv("FETCH_DELAY", 2.0))
    fetch_timeout: float = float(os.getenv("FETCH_TIMEOUT", 10.0))
    history_window: int = int(os.getenv("HISTORY_WINDOW", 300))
    ema_alpha: float = float(os.getenv("EMA_ALPHA", 0.1))
    min_weight: float = float(os.getenv("MIN_WEIGHT", 0.001))
    confidence_floor: float = float(os.getenv("CONFIDENCE_FLOOR", 0.55))
    confidence_ceiling: float = float(os.getenv("CONFIDENCE_CEILING", 0.98))
    history_limit: int = int(os.getenv("HISTORY_LIMIT", 200))
    api_key: str | None = os.getenv("API_KEY")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def session_options(self) -> dict:
        return {
            "ema_alpha": self.ema_alpha,
            "min_weight": self.min_weight,
            "history_window": self.history_window,
            "confidence_floor": self.confidence_floor,
            "confidence_ceiling": self.confidence_ceiling,
        }

settings = Settings()
