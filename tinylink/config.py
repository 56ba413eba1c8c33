import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Explicitly load .env from project root (parent of tinylink/)
ENV_PATH = Path(__file__).parent.parent / ".env"

DEFAULT_PORT = 3001


@dataclass(frozen=True)
class Settings:
    environment: str
    database_url: str
    host: str
    port: int
    base_url: str
    log_level: str = "INFO"

    @property
    def is_prod(self) -> bool:
        return self.environment == "prod"


def load_settings() -> Settings:
    load_dotenv(ENV_PATH)
    environment = os.getenv("ENVIRONMENT", "dev")

    try:
        port = int(os.getenv("PORT", DEFAULT_PORT))
    except ValueError:
        raise RuntimeError(f"PORT must be an integer, got {os.getenv('PORT')!r}")

    # Dev: SQLite (zero config), Prod: whatever DATABASE_URL points at
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        if environment == "prod":
            raise RuntimeError("DATABASE_URL must be set in production")
        database_url = f"sqlite:///{Path(__file__).parent.parent / 'tinylink_dev.db'}"

    base_url = os.getenv("BASE_URL") or f"http://localhost:{port}"

    return Settings(
        environment=environment,
        database_url=database_url,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        base_url=base_url.rstrip("/"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
