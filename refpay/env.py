import os
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DB_PATH = "data/refpay.db"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_DIR = "logs"


def load_env() -> None:
    """Load .env from the working directory if present. Real env vars win."""
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def db_path() -> Path:
    return Path(os.getenv("REFPAY_DB_PATH", DEFAULT_DB_PATH))


def log_level() -> str:
    return os.getenv("REFPAY_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def log_dir() -> Path:
    return Path(os.getenv("REFPAY_LOG_DIR", DEFAULT_LOG_DIR))
