"""
Application Configuration Module
================================
Centralizes runtime settings for the IoT Botnet Detection simulator.

Settings cover:
- Simulated processing delay before results are served
- Security headers and per-client rate limiting for the API
- Report signing key for exported results
- Optional TLS for the development server
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class AppConfig:
    """
    Runtime configuration settings.

    Attributes:
        processing_delay_seconds: Artificial "analysis" wait before results
        default_file_name: File name used when a view is opened without one
        secure_headers_enabled: Add CSP, X-Frame-Options and friends to responses
        rate_limit_enabled: Enforce the per-client request window
        report_signing_key: HMAC key for exported reports (random per process if unset)
        report_signing_key_configured: True when the key came from REPORT_SIGNING_KEY
    """

    # Analysis Flow
    processing_delay_seconds: float = 3.0
    default_file_name: str = "default.csv"

    # Secure Headers
    secure_headers_enabled: bool = True
    hsts_max_age: int = 31536000  # 1 year in seconds

    # Rate Limiting
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 60

    # Report Export
    report_signing_key: bytes = field(default_factory=lambda: os.urandom(32), repr=False)
    report_signing_key_configured: bool = False

    # Server
    host: str = "127.0.0.1"
    port: int = 5000
    ssl_enabled: bool = False
    min_tls_version: str = "TLSv1.2"
    ssl_cert_path: str = "ssl/cert.pem"
    ssl_key_path: str = "ssl/key.pem"

    @classmethod
    def from_environment(cls) -> "AppConfig":
        """
        Load configuration from environment variables.
        Falls back to defaults if not specified.
        """
        signing_key = os.getenv("REPORT_SIGNING_KEY")
        return cls(
            processing_delay_seconds=float(os.getenv("PROCESSING_DELAY_SECONDS", "3.0")),
            default_file_name=os.getenv("DEFAULT_FILE_NAME", "default.csv"),
            secure_headers_enabled=_env_flag("SECURE_HEADERS_ENABLED", "true"),
            rate_limit_enabled=_env_flag("RATE_LIMIT_ENABLED", "true"),
            rate_limit_requests=int(os.getenv("RATE_LIMIT_REQUESTS", "100")),
            rate_limit_window_seconds=int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60")),
            report_signing_key=signing_key.encode() if signing_key else os.urandom(32),
            report_signing_key_configured=bool(signing_key),
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "5000")),
            ssl_enabled=_env_flag("SSL_ENABLED", "false"),
            min_tls_version=os.getenv("MIN_TLS_VERSION", "TLSv1.2"),
            ssl_cert_path=os.getenv("SSL_CERT_PATH", "ssl/cert.pem"),
            ssl_key_path=os.getenv("SSL_KEY_PATH", "ssl/key.pem"),
        )

    def ssl_files_present(self) -> bool:
        return Path(self.ssl_cert_path).exists() and Path(self.ssl_key_path).exists()

    def validate(self) -> list[str]:
        """
        Validate configuration.
        Returns list of warnings.
        """
        issues = []

        if self.processing_delay_seconds < 0:
            issues.append("WARNING: Negative processing delay is treated as no delay")

        if self.processing_delay_seconds > 30:
            issues.append("WARNING: Processing delay above 30s makes the UI look hung")

        if not self.rate_limit_enabled:
            issues.append("WARNING: Rate limiting is disabled")

        if self.rate_limit_requests < 1:
            issues.append("WARNING: Rate limit below 1 request blocks every client")

        if len(self.report_signing_key) < 32:
            issues.append("WARNING: Report signing key shorter than 32 bytes")

        if self.min_tls_version in ("TLSv1.0", "TLSv1.1"):
            issues.append("WARNING: TLS 1.0/1.1 are deprecated - use TLSv1.2 or higher")

        return issues


def get_app_config() -> AppConfig:
    """Get configuration from environment or defaults."""
    return AppConfig.from_environment()
