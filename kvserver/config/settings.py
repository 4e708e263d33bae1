"""
KV-Server Configuration Settings

This module contains all configuration constants for the KV-Server.
Values can be overridden through environment variables.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server configuration settings."""

    # Network settings
    HOST: str = os.environ.get("KV_SERVER_HOST", "127.0.0.1")
    PORT: int = int(os.environ.get("KV_SERVER_PORT", "6379"))

    # Connection settings
    READ_BUFFER_SIZE: int = 65536  # Longest accepted request line, in bytes

    # Logging settings
    DEBUG: bool = os.environ.get("KV_SERVER_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("KV_SERVER_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
