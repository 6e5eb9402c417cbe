"""Application settings loaded from the environment"""
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    data_dir: str = "data"
    access_token_expire_minutes: int = 30
    bcrypt_rounds: int = 12
    log_level: str = "INFO"
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None


def get_settings() -> Settings:
    """Read settings from the environment (and a .env file if present)"""
    load_dotenv()
    return Settings(
        data_dir=os.getenv("HMS_DATA_DIR", "data"),
        access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30")),
        bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        admin_username=os.getenv("ADMIN_USERNAME") or None,
        admin_password=os.getenv("ADMIN_PASSWORD") or None,
    )
