# destitutes/config.py
# Settings come from .env / environment (DOI_*). Streamlit secrets can override
# the service account in streamlit_frontend/app.py.
import json
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DOI_", env_file=".env", extra="ignore")

    # ---------- Firebase ----------
    firebase_api_key: Optional[str] = None
    firebase_project_id: Optional[str] = None
    firebase_storage_bucket: Optional[str] = None
    firebase_service_account: Optional[str] = None  # path to JSON, or the JSON itself

    photos_collection: str = "photos"
    users_collection: str = "users"
    feed_limit: int = 50

    # ---------- Upload flow ----------
    jpeg_quality: int = 80
    geolocation_timeout_ms: int = 10_000
    geolocation_max_age_ms: int = 60_000

    # ---------- Donation ----------
    razorpay_key_id: Optional[str] = None
    razorpay_key_secret: Optional[str] = None
    donation_currency: str = "INR"
    donation_max: int = 100_000
    donation_presets: List[int] = Field(default_factory=lambda: [100, 250, 500, 1000, 2500, 5000])
    donation_default: int = 500

    # ---------- Contact / misc ----------
    contact_relay_url: Optional[str] = None
    public_base_url: str = "http://localhost:8501"
    log_level: str = "INFO"

    def require(self, *names: str) -> None:
        missing = [n for n in names if not (getattr(self, n) or "")]
        if missing:
            env = ", ".join(f"DOI_{n.upper()}" for n in missing)
            raise ConfigError(f"Missing required settings: {env}")

    def service_account_info(self) -> dict:
        """
        Resolve the Firebase service account into a dict.
        Accepts inline JSON or a path to the downloaded key file.
        """
        self.require("firebase_service_account")
        raw = self.firebase_service_account.strip()
        if raw.startswith("{"):
            try:
                return json.loads(raw)
            except ValueError as e:
                raise ConfigError(f"DOI_FIREBASE_SERVICE_ACCOUNT is not valid JSON: {e}") from e

        p = Path(raw)
        if not p.exists():
            raise ConfigError(f"Service account file not found: {p}")
        try:
            return json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigError(f"Failed to read service account file {p}: {e}") from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
