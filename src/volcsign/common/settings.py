"""Configuration management using pydantic-settings."""

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Signer settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="VOLCSIGN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Credentials
    access_key: str | None = Field(
        default=None,
        description="Access key id issued by the API's access control console",
    )
    secret_key: SecretStr | None = Field(
        default=None,
        description="Secret key paired with the access key",
    )

    # Signing scope
    region: str = Field(
        default="cn-beijing",
        description="Region name placed in the credential scope",
    )
    service: str = Field(
        default="cv",
        description="Service name placed in the credential scope",
    )

    # Endpoint
    host: str = Field(
        default="visual.volcengineapi.com",
        description="Host header value covered by the signature",
    )
    endpoint: str = Field(
        default="https://visual.volcengineapi.com",
        description="Base URL requests are posted to",
    )
    content_type: str = Field(
        default="application/json",
        description="Content-Type of the request body",
    )

    # Timeouts
    http_timeout: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds",
    )

    # Diagnostics
    debug_signing: bool = Field(
        default=False,
        description="Log canonical request, string to sign and signature (debug only)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the CLI",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON log lines instead of console output",
    )

    @property
    def secret_key_value(self) -> str | None:
        """Get the plain secret key, if configured."""
        return self.secret_key.get_secret_value() if self.secret_key else None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()
