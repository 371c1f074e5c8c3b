import logging
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    # Seed file for the in-memory stores
    seed_path: Path = PROJECT_ROOT / "data" / "seed.json"

    # Seconds between an expense write and its alert recomputation
    alert_check_delay: float = 0.5

    # Simulated latency of store calls, in seconds
    store_latency: float = 0.0

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="BUDGETWATCH_",
        env_file=PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def configure_logging(level: str = None) -> None:
    """Attach a stream handler to the package logger once."""
    logger = logging.getLogger("budgetwatch")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel((level or settings.log_level).upper())
