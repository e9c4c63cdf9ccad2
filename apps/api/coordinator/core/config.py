"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.01.00"

    # Database
    DATABASE_URL: str = "sqlite:///./coordinator.db"

    # Fallback for organizations without a configured timezone
    DEFAULT_TIMEZONE: str = "America/Los_Angeles"

    # Appointment proposals
    PROPOSAL_TTL_HOURS: int = 48
    MAX_PROPOSAL_SLOTS: int = 3

    # Approval policy time windows (local organization time)
    EVENING_START_HOUR: int = 17  # 5:00 PM

    # Calendar placement defaults for never-scheduled, timed jobs
    DEFAULT_JOB_START_MINUTE: int = 8 * 60  # 08:00
    DEFAULT_JOB_DURATION_MINUTES: int = 120

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
