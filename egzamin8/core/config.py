"""
Application configuration.
All settings are loaded from environment variables.
Use env.example as a reference for available variables.
"""
import json

from pydantic import field_validator
from pydantic_settings import BaseSettings


DEFAULT_CHECKOUT_LINKS = {
    "polski": "https://buy.stripe.com/fZubJ0eCE9BCc575BrdnW03?locale=pl",
    "matematyka": "https://buy.stripe.com/6oUcN47accNO6KN1lbdnW02?locale=pl",
    "angielski": "https://buy.stripe.com/5kQ00i2TWaFGb137JzdnW04?locale=pl",
    "pakiet": "https://buy.stripe.com/bJe7sKgKMg002ux1lbdnW01?locale=pl",
}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    SESSION_SECRET has a development default; production must override it.
    """

    # ===========================================
    # APPLICATION
    # ===========================================
    app_env: str = "local"
    # CORS: comma separated (e.g. http://localhost:3000). Empty = default list in main.py.
    cors_origins: str = ""

    # ===========================================
    # CATALOG
    # ===========================================
    # Directory with catalog.yaml and per-subject files. Empty = bundled data.
    catalog_dir: str = ""
    # JSON object {product_id: checkout link}. Bundle link is stored under bundle_id.
    checkout_links: str = json.dumps(DEFAULT_CHECKOUT_LINKS)

    # ===========================================
    # BUNDLE OFFER
    # ===========================================
    bundle_id: str = "pakiet"
    bundle_price: float = 99.99
    bundle_original_price: float = 149.97
    bundle_savings: float = 50

    # ===========================================
    # ENTITLEMENTS (client-side storage)
    # ===========================================
    entitlements_storage_key: str = "egzamin8_purchases"
    entitlements_cookie_max_age: int = 10 * 365 * 24 * 3600  # permanent for practical purposes

    # ===========================================
    # SESSION / COOKIES
    # ===========================================
    session_secret: str = "egzamin8-local-development-secret"
    view_state_cookie_name: str = "egzamin8_view"
    cookie_secure: bool = False  # Set True in production (HTTPS)
    cookie_samesite: str = "lax"

    # ===========================================
    # PROMO (countdown banner, purchase notifications)
    # ===========================================
    promo_countdown_start: str = "02:37:45"
    promo_tick_seconds: float = 1.0
    promo_first_notification_seconds: float = 5.0
    promo_notification_interval_seconds: float = 30.0
    promo_notification_min_delay_seconds: float = 15.0
    promo_notification_max_delay_seconds: float = 30.0
    promo_notification_display_seconds: float = 5.0

    # ===========================================
    # LOGGING
    # ===========================================
    log_file: str | None = None
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5

    @field_validator("checkout_links")
    @classmethod
    def validate_checkout_links(cls, v: str) -> str:
        """Must be a JSON object of string -> string."""
        try:
            parsed = json.loads(v)
        except json.JSONDecodeError as e:
            raise ValueError(f"checkout_links is not valid JSON: {e}") from e
        if not isinstance(parsed, dict) or not all(
            isinstance(k, str) and isinstance(val, str) for k, val in parsed.items()
        ):
            raise ValueError("checkout_links must be a JSON object of product_id -> url")
        return v

    @field_validator("promo_countdown_start")
    @classmethod
    def validate_countdown_start(cls, v: str) -> str:
        parts = v.split(":")
        if len(parts) != 3 or not all(p.isdigit() for p in parts):
            raise ValueError("promo_countdown_start must look like HH:MM:SS")
        return v

    @field_validator("session_secret")
    @classmethod
    def validate_session_secret(cls, v: str) -> str:
        """Ensure session secret is reasonably secure."""
        if len(v) < 16:
            raise ValueError("session_secret must be at least 16 characters")
        if v in ("changeme", "secret", "password", "admin"):
            raise ValueError("session_secret is too weak, please change it")
        return v

    @property
    def checkout_links_map(self) -> dict[str, str]:
        return json.loads(self.checkout_links)

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # unknown keys in .env are ignored


settings = Settings()
