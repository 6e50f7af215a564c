"""DuoReport — Central Configuration via Pydantic Settings."""

from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Meta API ──
    meta_access_token: str = ""
    meta_ad_account_id: str = ""
    meta_api_version: str = "v19.0"
    meta_base_url: str = "https://graph.facebook.com"
    meta_conversion_action: str = "SurveyCompleted"

    # ── TikTok API ──
    tiktok_access_token: str = ""
    tiktok_advertiser_id: str = ""
    tiktok_api_version: str = "v1.3"
    tiktok_base_url: str = "https://business-api.tiktok.com/open_api"
    tiktok_conversion_metric: str = "submit_form"

    # ── Upstream HTTP ──
    http_timeout: float = 30.0
    upstream_max_retries: int = 3
    upstream_retry_base_delay: float = 2.0  # seconds
    upstream_max_pages: int = 20

    # ── Reporting window ──
    default_lookback_days: int = 90
    allowed_lookback_days: List[int] = [90, 365]
    report_currency: str = "GBP (£)"

    # ── AI Providers ──
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    sarvam_api_key: Optional[str] = None
    default_ai_provider: str = "claude"  # claude | openai | sarvam
    chat_history_limit: int = 20

    # ── App ──
    log_level: str = "INFO"

    @property
    def meta_configured(self) -> bool:
        return bool(self.meta_access_token and self.meta_ad_account_id)

    @property
    def tiktok_configured(self) -> bool:
        return bool(self.tiktok_access_token and self.tiktok_advertiser_id)

    def missing_credentials(self) -> List[str]:
        """Names of the upstream credential variables that are not set."""
        required = {
            "META_ACCESS_TOKEN": self.meta_access_token,
            "META_AD_ACCOUNT_ID": self.meta_ad_account_id,
            "TIKTOK_ACCESS_TOKEN": self.tiktok_access_token,
            "TIKTOK_ADVERTISER_ID": self.tiktok_advertiser_id,
        }
        return [name for name, value in required.items() if not value]

    @property
    def credentials_complete(self) -> bool:
        return not self.missing_credentials()

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
