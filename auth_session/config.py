"""
Configuration Management

Settings for the auth session client, loaded from environment variables
(prefix ``AUTH_``) or a ``.env`` file with sensible defaults.
"""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra fields from .env that aren't in the model
    )
    
    # ============================================================
    # Backend Connection
    # ============================================================
    api_url: str = Field("http://localhost:8000", description="Auth backend base URL")
    request_timeout: Optional[float] = Field(
        None,
        description="Request timeout in seconds (unset = wait indefinitely)"
    )
    verify_ssl: bool = Field(True, description="Verify TLS certificates of the backend")
    
    # ============================================================
    # Session Behaviour
    # ============================================================
    rollback_failed_handle_updates: bool = Field(
        True,
        description="Restore the previous user when an optimistic handle update fails"
    )
    google_config_hint: str = Field(
        "Please configure server .env with real keys.",
        description="Hint appended to Google login failure notifications"
    )
    
    @property
    def base_url(self) -> str:
        """API URL without trailing slash."""
        return self.api_url.rstrip("/")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get client settings (singleton).
    
    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = Settings()
    return _settings
