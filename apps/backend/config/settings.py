# apps/backend/config/settings.py

import os
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def is_enabled(flag: str, default: bool = False) -> bool:
    return os.getenv(flag, str(default)).lower() == "true"


def _csv(value: Optional[str]) -> List[str]:
    return [x.strip() for x in (value or "").split(",") if x.strip()]


class Settings(BaseModel):
    GOLDREWARDS_VERSION: str = "0.1.0"

    STORE_BACKEND: Literal["supabase", "memory"] = "supabase"
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    SUPABASE_TABLE_PREFIX: str = ""

    # fallback when no gold price has been set in the config collection
    DEFAULT_GOLD_PRICE: float = Field(default=60.0, gt=0)

    ADMIN_TOKEN: Optional[str] = None
    CORS_MODE: Literal["off", "allowlist"] = "off"
    CORS_ALLOW_ORIGINS: List[str] = Field(default_factory=list)

    LOG_LEVEL: str = "INFO"
    REQUEST_LOGGING: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        raw = {
            "GOLDREWARDS_VERSION": os.getenv("GOLDREWARDS_VERSION"),
            "STORE_BACKEND": os.getenv("STORE_BACKEND"),
            "SUPABASE_URL": (os.getenv("SUPABASE_URL") or "").strip() or None,
            "SUPABASE_SERVICE_ROLE_KEY": (
                os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY") or ""
            ).strip() or None,
            "SUPABASE_TABLE_PREFIX": os.getenv("SUPABASE_TABLE_PREFIX"),
            "DEFAULT_GOLD_PRICE": os.getenv("DEFAULT_GOLD_PRICE"),
            "ADMIN_TOKEN": os.getenv("ADMIN_TOKEN") or None,
            "CORS_MODE": os.getenv("CORS_MODE"),
            "CORS_ALLOW_ORIGINS": _csv(os.getenv("CORS_ALLOW_ORIGINS")),
            "LOG_LEVEL": os.getenv("LOG_LEVEL"),
            "REQUEST_LOGGING": is_enabled("REQUEST_LOGGING", True),
        }
        return cls(**{k: v for k, v in raw.items() if v is not None})


settings = Settings.from_env()
