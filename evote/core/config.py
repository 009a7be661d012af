from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "eVote API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database (Azure SQL via aioodbc or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./evote_dev.db",
        alias="DATABASE_URL",
    )

    # Timeline evaluation
    stage_refresh_seconds: int = Field(
        default=60, alias="STAGE_REFRESH_SECONDS",
    )  # Periodic fallback refresh for the timeline monitor

    # Tally reconciliation
    tally_reconcile_seconds: int = Field(
        default=0, alias="TALLY_RECONCILE_SECONDS",
    )  # 0 disables the periodic job; POST /admin/tallies/reconcile still works
    claim_sweep_grace_seconds: float = Field(
        default=60.0, alias="CLAIM_SWEEP_GRACE_SECONDS",
    )  # Claims younger than this are assumed still in flight and not swept

    # Vote submission deadlines
    vote_submission_timeout_seconds: float = Field(
        default=10.0, alias="VOTE_SUBMISSION_TIMEOUT_SECONDS",
    )  # Pre-claim checks (voter, window, ballot)
    vote_persist_timeout_seconds: float = Field(
        default=10.0, alias="VOTE_PERSIST_TIMEOUT_SECONDS",
    )  # Ballot persistence after the claim

    # Request audit trail
    request_audit_enabled: bool = Field(default=True, alias="REQUEST_AUDIT_ENABLED")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

settings = Settings()
