import os
from typing import List, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

# Load .env file variables into environment
load_dotenv(verbose=True)

DEFAULT_TIMEOUT_SECONDS = 10.0


class Settings:
    """Client configuration settings loaded from environment variables."""

    # --- Core Settings ---
    CALLTRACE_BASE_URL: Optional[str] = None
    CALLTRACE_TIMEOUT: float = DEFAULT_TIMEOUT_SECONDS

    # --- Logging Settings ---
    LOG_LEVEL: str = "INFO"
    CALLTRACE_INVOCATION_LOG_LEVEL: str = "INFO"
    # Comma-separated list of extra parameter names whose values are redacted in invocation logs
    CALLTRACE_REDACT_PARAMETERS: Optional[str] = None

    # --- Helper Methods using os.getenv ---
    def get_base_url(self) -> Optional[str]:
        """Returns the default service base URL as a string, if set."""
        url = os.getenv("CALLTRACE_BASE_URL")
        if url:
            parsed = urlparse(url)
            if not all([parsed.scheme, parsed.netloc]):
                raise ValueError(f"Invalid CALLTRACE_BASE_URL format: {url}")
        return url

    def get_timeout(self) -> float:
        """Returns the request timeout in seconds."""
        timeout_str = os.getenv("CALLTRACE_TIMEOUT")
        if timeout_str is None:
            return DEFAULT_TIMEOUT_SECONDS
        try:
            return float(timeout_str)
        except ValueError:
            raise ValueError("CALLTRACE_TIMEOUT environment variable must be a number.")

    # --- Logging Settings ---
    def get_log_level(self, default: str = "INFO") -> str:
        """Gets the configured log level, defaulting if not set."""
        return os.getenv("LOG_LEVEL", default).upper()

    def get_invocation_log_level(self, default: str = "INFO") -> str:
        """Gets the level invocation logging interceptors log at."""
        return os.getenv("CALLTRACE_INVOCATION_LOG_LEVEL", default).upper()

    def get_redact_parameters(self) -> List[str]:
        """Returns the extra parameter names to redact, lower-cased."""
        raw = os.getenv("CALLTRACE_REDACT_PARAMETERS", "")
        return [name.strip().lower() for name in raw.split(",") if name.strip()]
