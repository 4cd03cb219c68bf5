"""
Evernote REST — Application Configuration
===========================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types, and provides a singleton `settings` object.
Who:   Imported by the connection layer, logging setup and main.py.
When:  Loaded once at module import time; validated before the app starts.
"""

from enum import Enum
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from evernote_rest import __version__


class EvernoteEnvironment(str, Enum):
    """The two Evernote service environments and their hosts."""

    SANDBOX = "sandbox"
    PRODUCTION = "production"

    @property
    def host(self) -> str:
        if self is EvernoteEnvironment.PRODUCTION:
            return "www.evernote.com"
        return "sandbox.evernote.com"

    @property
    def user_store_url(self) -> str:
        return f"https://{self.host}/edam/user"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. A deployment that serves a single
    Evernote account sets EVERNOTE_ACCESS_TOKEN and one of the
    *_TOKEN_FROM_CONFIG switches; a multi-user deployment leaves them off and
    expects callers to send the evernote-rest-accesstoken header.
    """

    # ── Evernote credentials ──────────────────────────────────────────────
    # Reserved for the OAuth token flow; not read by dispatch, which only
    # needs an access token.
    evernote_consumer_key: str = Field(default="")
    evernote_consumer_secret: str = Field(default="")
    evernote_access_token: str = Field(default="")

    evernote_environment: EvernoteEnvironment = Field(default=EvernoteEnvironment.SANDBOX)

    # Ignore the request header entirely and always use the configured token
    evernote_always_use_token_from_config: bool = Field(default=False)

    # Use the configured token only when the request header is missing
    evernote_fallback_to_token_from_config: bool = Field(default=False)

    evernote_user_agent: str = Field(default=f"evernote-rest/{__version__}")

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @property
    def uses_config_token(self) -> bool:
        return self.evernote_always_use_token_from_config or self.evernote_fallback_to_token_from_config

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that the token settings are consistent.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors: List[str] = []
        if self.uses_config_token and not self.evernote_access_token:
            errors.append(
                "EVERNOTE_ACCESS_TOKEN is not set but a *_TOKEN_FROM_CONFIG switch is on. "
                "Create a developer token at "
                f"https://{self.evernote_environment.host}/api/DeveloperToken.action"
            )
        if self.evernote_always_use_token_from_config and self.evernote_fallback_to_token_from_config:
            errors.append(
                "EVERNOTE_ALWAYS_USE_TOKEN_FROM_CONFIG already implies "
                "EVERNOTE_FALLBACK_TO_TOKEN_FROM_CONFIG; set only one of them."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
