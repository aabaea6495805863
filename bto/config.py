'''
Settings for the BTO service.

Values come from the environment (optionally a .env file in the working
directory). Nothing here builds engines or sessions; see bto.db.session.
'''
# bto/config.py
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@dataclass(frozen=True)
class Settings:
    database_url: str
    secret_key: str
    log_dir: str
    log_level: str
    seed_data_dir: Optional[str]
    default_password: str
    host: str
    port: int


def get_settings() -> Settings:
    """Read settings from the current environment."""
    default_db_url = f"sqlite:///{os.path.join(BASE_DIR, 'bto.db')}"
    secret_key = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
    return Settings(
        database_url=os.getenv("DATABASE_URL", default_db_url),
        secret_key=secret_key,
        log_dir=os.getenv("LOG_DIR", "logs"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        seed_data_dir=os.getenv("SEED_DATA_DIR") or None,
        default_password=os.getenv("DEFAULT_PASSWORD", "password"),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", 5000)),
    )
