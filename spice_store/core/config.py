import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_PROMO_CODE = "FREEDELIVERY"
DEFAULT_FROM_EMAIL = "Royal Pure Spices <onboarding@resend.dev>"


def _env(*names: str, default: Optional[str] = None) -> Optional[str]:
    # The hosted dashboard refuses names starting with SUPABASE_, so both spellings are read.
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


class Settings:
    def __init__(self, **overrides):
        self.APP_NAME: str = _env("APP_NAME", default="Royal Pure Spices Store API")
        self.SUPABASE_URL: Optional[str] = _env("SUPABASE_URL", "PROJECT_URL")
        self.SUPABASE_ANON_KEY: Optional[str] = _env("SUPABASE_ANON_KEY")
        self.SUPABASE_SERVICE_KEY: Optional[str] = _env(
            "SUPABASE_SERVICE_KEY", "SUPABASE_SERVICE_ROLE_KEY", "SERVICE_ROLE_KEY"
        )
        self.RESEND_API_KEY: Optional[str] = _env("RESEND_API_KEY")
        self.FROM_EMAIL: str = _env("FROM_EMAIL", default=DEFAULT_FROM_EMAIL)
        self.ADMIN_EMAIL: Optional[str] = _env("ADMIN_EMAIL")
        # An explicitly empty PROMO_CODE means "no promo configured".
        self.PROMO_CODE: Optional[str] = os.getenv("PROMO_CODE", DEFAULT_PROMO_CODE)
        self.RETRY_ATTEMPTS: int = int(os.getenv("RETRY_ATTEMPTS", "3"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)

    @property
    def supabase_key(self) -> Optional[str]:
        """Server-side calls prefer the service role key, falling back to the anon key."""
        return self.SUPABASE_SERVICE_KEY or self.SUPABASE_ANON_KEY


@lru_cache()
def get_settings() -> Settings:
    return Settings()
