"""Application configuration via environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Lead notification email (Resend)
    email_from: str = "Leads <onboarding@yourdomain.com>"
    email_to: str = "your-professional-email@example.com"
    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com/emails"
    dispatch_timeout_seconds: float = 10.0

    # Contact form rate limiting
    rate_limit_max: int = 5
    rate_limit_unknown_max: int = 10
    rate_limit_window_ms: int = 60_000
    rate_limit_cleanup_interval_ms: int = 300_000

    # Bot detection
    min_submission_time_ms: int = 2000
    require_form_token: bool = False

    # Contact form choices
    project_types: list[str] = [
        "Corporate Film",
        "Live Event Coverage",
        "Marketing Video (Social/Web)",
        "Commercial/Ad",
        "Wedding",
        "Other",
    ]
    budget_ranges: list[str] = [
        "Under £500",
        "£500 - £2k",
        "£2k - £5k",
        "£5k+",
    ]

    # Front-matter content (portfolio/, testimonials/)
    content_dir: str = "content"

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
