from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class Settings(BaseSettings):
    """
    Runtime configuration for a trace collection run.
    Defaults match a run from the repository root; ops override via ENV.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Credentials / verbosity ---
    wpt_key: Optional[str] = None
    debug: bool = False

    # --- Collection ---
    trace_samples: int = Field(default=9, ge=1)
    urls_file: Path = Path("urls.json")
    output_dir: Path = Path("dist/lantern-traces")
    archive_path: Path = Path("dist/lantern-traces.zip")

    # --- Local Lighthouse ---
    lighthouse_command: List[str] = ["lighthouse"]
    artifacts_dir: Path = Path(".tmp/collect-traces-artifacts")

    # --- WebPageTest ---
    wpt_base_url: str = "https://www.webpagetest.org"
    wpt_location: str = "Dulles:Chrome.3G"
    poll_fallback_seconds: float = 5
    request_timeout: float = 60  # seconds

    # --- Retry policy (unset = retry forever) ---
    retry_max_attempts: Optional[int] = Field(default=None, ge=1)
    retry_backoff_seconds: float = 0.0

    # --- Logging ---
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    @field_validator("debug", mode="before")
    @classmethod
    def _debug_flag(cls, value):
        # Any non-empty DEBUG turns verbose logging on, e.g. DEBUG=lighthouse:*
        if isinstance(value, str):
            return bool(value.strip())
        return value

    @property
    def manifest_path(self) -> Path:
        return self.output_dir / "summary.json"

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()

    def require_api_key(self) -> str:
        """Return the WebPageTest API key or fail before any work starts."""
        if not self.wpt_key:
            raise ConfigurationError("missing WPT_KEY")
        return self.wpt_key
