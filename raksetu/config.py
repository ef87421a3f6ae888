# SPDX-License-Identifier: Apache-2.0

"""
Application configuration read from the environment.
"""

import os
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import __version__


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


class Settings(BaseModel):
    """Every recognised configuration option of the API."""

    model_config = ConfigDict(frozen=True)

    environment: str = 'development'
    service_version: str = __version__

    # Emergency requests
    mongodb_uri: str = 'mongodb://localhost:27017/raksetu_dev'
    mongodb_database: str = 'raksetu_dev'
    emergency_list_limit: int = Field(50, ge=1, le=500)

    # Preferences
    preference_backend: str = 'redis'
    redis_url: str = 'redis://localhost:6379'
    preference_ttl_seconds: Optional[int] = Field(365 * 24 * 3600, ge=1)

    # Translations
    translations_base_url: Optional[str] = None
    translations_dir: Optional[str] = None
    translation_timeout_seconds: float = Field(5.0, gt=0)
    translation_workers: int = Field(4, ge=1)
    missing_translation_placeholder: Optional[str] = None

    # Observability
    otel_enabled: bool = True
    otlp_endpoint: Optional[str] = None

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        if v not in ('development', 'test', 'staging', 'production'):
            raise ValueError(f"Unknown environment: {v}")
        return v

    @field_validator('preference_backend')
    @classmethod
    def validate_preference_backend(cls, v):
        if v not in ('redis', 'memory'):
            raise ValueError("PREFERENCE_BACKEND must be 'redis' or 'memory'")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == 'production'

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, unset ones keep their defaults."""
        values = {
            'environment': os.getenv('ENVIRONMENT'),
            'service_version': os.getenv('SERVICE_VERSION'),
            'mongodb_uri': os.getenv('MONGODB_URI'),
            'mongodb_database': os.getenv('MONGODB_DATABASE'),
            'emergency_list_limit': os.getenv('EMERGENCY_LIST_LIMIT'),
            'preference_backend': os.getenv('PREFERENCE_BACKEND'),
            'redis_url': os.getenv('REDIS_URL'),
            'preference_ttl_seconds': os.getenv('PREFERENCE_TTL_SECONDS'),
            'translations_base_url': os.getenv('TRANSLATIONS_BASE_URL') or None,
            'translations_dir': os.getenv('TRANSLATIONS_DIR') or None,
            'translation_timeout_seconds': os.getenv('TRANSLATION_TIMEOUT_SECONDS'),
            'translation_workers': os.getenv('TRANSLATION_WORKERS'),
            'missing_translation_placeholder': os.getenv('MISSING_TRANSLATION_PLACEHOLDER'),
            'otlp_endpoint': os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT') or None,
        }
        values = {key: value for key, value in values.items() if value is not None}
        values['otel_enabled'] = _env_flag('OTEL_ENABLED', 'true')
        return cls(**values)
