# bakery/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)
      - DATABASE_URL (Supabase Postgres connection string)
      - SUPABASE_JWT_SECRET (JWT signing secret from Supabase project settings)

    Optional:
      - SUPABASE_SERVICE_ROLE_KEY (storage uploads for payment proofs)
      - ADMIN_EMAILS (JSON list, e.g. '["owner@example.com"]')
      - GEMINI_API_KEY (enables AI verification of payment proofs)
      - ORDER_NOTIFY_EMAIL (where new-order emails are sent)
    """

    PROJECT_NAME: str = "Sourdough Bakery API"
    API_V1_STR: str = "/api/v1"

    # Supabase / DB config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    DATABASE_URL: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Service role key bypasses RLS (backend only)
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # Admin access is granted by email, not by a role column
    ADMIN_EMAILS: list[str] = []

    # Bakery operations
    PICKUP_LOCATIONS: list[str] = [
        "Centurion Golf Estate",
        "Doxa Deo Midstream",
    ]
    BAKERY_TIMEZONE: str = "Africa/Johannesburg"
    CURRENCY_SYMBOL: str = "R"
    PAYMENT_PROOF_BUCKET: str = "payment-proofs"

    # New-order notifications
    ORDER_NOTIFY_EMAIL: str | None = None

    # Payment proof verification (Gemini)
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    VERIFICATION_MIN_CONFIDENCE: int = 70

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
