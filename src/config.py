"""
Application Configuration Module.

Manages application settings and environment variables using Pydantic for validation.
Provides centralized configuration management with type safety and validation.

Features:
- Environment variable loading and validation
- Secure credential management
- Default account analysis options
- Path normalization for output directories
"""

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import os
from logger import LogManager


class Settings(BaseSettings):
    """
    Application configuration settings with validation.

    Manages and validates all application settings including:
    - Application identification
    - GitHub authentication and transport tuning
    - Default account analysis options
    - Logging settings
    - Output directory configuration

    Attributes:
        app_name (str): Name of the application
        dev (bool): Debug mode flag
        log_dir (str): Directory for log files
        log_level (int): Logging level (default: info)
        github_token (Optional[SecretStr]): GitHub API token, raises the rate limit
        github_api_url (str): GitHub REST API base URL
        github_handles (str): Comma-separated account handles or profile URLs
        output_dir (str): Directory for generated account snapshots
    """

    # Application settings
    app_name: str = Field(default="Devyzer", description="Application name")
    dev: bool = Field(default=False, description="Debug mode")
    log_dir: str = Field(default="logs", description="Logging directory")
    log_level: int = Field(default=20, description="Logging level, default info")

    # GitHub configuration
    github_token: Optional[SecretStr] = Field(
        default=None, description="GitHub token (optional, raises rate limits)"
    )
    github_api_url: str = Field(
        default="https://api.github.com", description="GitHub REST API base URL"
    )
    github_handles: str = Field(
        default="", description="Comma-separated GitHub handles or profile URLs"
    )
    request_timeout: int = Field(default=30, description="HTTP timeout in seconds")

    # Rate limit backoff
    rate_limit_max_attempts: int = Field(
        default=3, description="Attempts per request while rate limited"
    )
    rate_limit_base_delay: float = Field(
        default=2.0, description="First backoff delay in seconds, doubled per retry"
    )

    # Account analysis defaults
    max_repos: int = Field(default=100, description="Maximum repositories to list")
    include_organizations: bool = Field(
        default=True, description="Fetch organization memberships"
    )
    analyze_content: bool = Field(
        default=False, description="Run repository content analysis"
    )
    max_content_analysis: int = Field(
        default=10, description="Maximum repositories to content-analyze"
    )
    content_concurrency: int = Field(
        default=4, description="Repositories analyzed concurrently"
    )

    output_dir: str = Field(default="snapshots", description="Snapshot output directory")

    @property
    def handles(self) -> List[str]:
        """
        Get list of account handles from configuration.

        Splits and cleans the comma-separated handles string.

        Returns:
            List[str]: List of non-empty handles
        """
        return [handle.strip() for handle in self.github_handles.split(",") if handle.strip()]

    @field_validator("output_dir")
    def ensure_absolute_path(cls, v: str) -> str:
        """
        Ensure output directory path is absolute.

        Args:
            v (str): Directory path to validate

        Returns:
            str: Absolute path to output directory
        """
        if not os.path.isabs(v):
            return os.path.abspath(v)
        return v

    # Configure env file loading
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
    )


# Create global settings instance
settings = Settings()

# Initialize logging configuration
logger = LogManager(
    app_name=settings.app_name.lower(),
    log_dir=settings.log_dir,
    development=settings.dev,
    level=settings.log_level,
).logger
