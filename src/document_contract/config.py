"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DOCUMENT_CONTRACT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Resource URIs
    uri_scheme: str = Field(
        default="content",
        description="Scheme used when building resource URIs",
    )

    # Thumbnails
    thumbnail_region_limit: int = Field(
        default=64 * 1024,
        description="Largest embedded thumbnail region read into memory, in bytes",
    )

    # Remote providers (HTTP transport)
    provider_api_base: str = Field(
        default="http://127.0.0.1:8000/providers",
        description="Base URL of the provider host",
    )
    provider_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for provider requests",
    )
    provider_authorities: List[str] = Field(
        default_factory=list,
        description="Authorities reached through the provider host",
    )

    # Local directory provider
    local_root_dir: str = Field(
        default="",
        description="Directory exposed by the local provider (leave empty to disable)",
    )
    local_authority: str = Field(
        default="com.example.documents.local",
        description="Authority of the local provider",
    )
    local_root_title: str = Field(
        default="Local storage",
        description="Title of the local provider's root",
    )

    # HTTP Server
    http_host: str = Field(
        default="127.0.0.1",
        description="HTTP server host",
    )
    http_port: int = Field(
        default=8000,
        description="HTTP server port",
    )

    def is_local_provider_configured(self) -> bool:
        """Check if the local directory provider is configured."""
        return bool(self.local_root_dir) and Path(self.local_root_dir).is_dir()

    def get_remote_authorities(self) -> list[str]:
        """
        Get authorities served by a remote provider host.

        Returns:
            List of authorities, without the local provider's own authority
        """
        return [
            authority
            for authority in self.provider_authorities
            if authority != self.local_authority
        ]


# Global settings instance
settings = Settings()
