import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(dotenv_path=Path('.env.local'))


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    default_rows: int = 8
    default_cols: int = 8
    default_mines: int = 10
    max_dimension: int = 40
    allow_anon: bool = True
    default_user_id: str = "local-user"
    log_level: str = "INFO"


def load_settings() -> Settings:
    return Settings(
        default_rows=int(os.getenv("DEFAULT_ROWS", "8")),
        default_cols=int(os.getenv("DEFAULT_COLS", "8")),
        default_mines=int(os.getenv("DEFAULT_MINES", "10")),
        max_dimension=int(os.getenv("MAX_DIMENSION", "40")),
        allow_anon=_flag("ALLOW_ANON", "1"),
        default_user_id=os.getenv("DEFAULT_USER_ID", "local-user"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
